from datetime import datetime


def test_create_course(client):
    res = client.post("/courses", json={"title": "Nav101", "instructor": "A. Pilot"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    course = body["course"]
    assert course["id"].isdigit()
    assert course["students"] == 0
    assert course["title"] == "Nav101"
    assert course["instructor"] == "A. Pilot"
    datetime.fromisoformat(course["createdAt"])


def test_course_round_trip(client):
    client.post("/courses", json={"title": "Nav101", "instructor": "A. Pilot", "level": "basic"})
    res = client.get("/courses")
    assert res.status_code == 200
    courses = res.json()["courses"]
    assert len(courses) == 1
    assert courses[0]["title"] == "Nav101"
    assert courses[0]["level"] == "basic"
    assert courses[0]["students"] == 0


def test_create_course_requires_title(client):
    res = client.post("/courses", json={"instructor": "A. Pilot"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Missing required field: title"}


def test_update_course_by_body_and_path(client):
    course_id = client.post("/courses", json={"title": "Nav101"}).json()["course"]["id"]

    res = client.patch("/courses", json={"courseId": course_id, "duration": "2h"})
    assert res.status_code == 200
    assert res.json()["course"]["duration"] == "2h"
    assert "updatedAt" in res.json()["course"]

    res = client.patch(f"/courses/{course_id}", json={"status": "archived"})
    assert res.status_code == 200
    assert res.json()["course"]["status"] == "archived"
    assert res.json()["course"]["duration"] == "2h"


def test_update_missing_course(client):
    res = client.patch("/courses", json={"courseId": "123", "title": "x"})
    assert res.status_code == 404
    assert res.json()["error"] == "Course not found"


def test_delete_course(client):
    first = client.post("/courses", json={"title": "Nav101"}).json()["course"]["id"]
    second = client.post("/courses", json={"title": "Wx201"}).json()["course"]["id"]

    res = client.request("DELETE", "/courses", json={"courseId": first})
    assert res.status_code == 200

    res = client.delete(f"/courses/{second}")
    assert res.status_code == 200

    assert client.get("/courses").json()["courses"] == []
    assert client.delete(f"/courses/{second}").status_code == 404


def test_students_crud(client):
    res = client.post("/students", json={"name": "Student One", "jalId": "JAL100", "progress": 10})
    assert res.status_code == 200
    student = res.json()["student"]
    assert student["id"].isdigit()
    assert "enrolledAt" in student

    res = client.patch("/students", json={"studentId": student["id"], "progress": 55})
    assert res.json()["student"]["progress"] == 55

    res = client.patch("/students", json={"studentId": student["id"], "progress": 150})
    assert res.status_code == 400

    res = client.request("DELETE", "/students", json={"studentId": student["id"]})
    assert res.status_code == 200
    assert client.get("/students").json()["students"] == []
