BODY = {
    "pilotId": "JAL500",
    "pilotName": "Cadet",
    "topicId": "t1",
    "topicName": "Crosswind landings",
    "scheduledDate": "2026-11-02",
    "scheduledTime": "19:00",
    "assignedTrainer": "trainer-1",
}


def test_schedule_assignment(client):
    res = client.post("/training-assignments", json=BODY)
    assert res.status_code == 200
    assignment = res.json()["assignment"]
    assert assignment["status"] == "scheduled"
    assert assignment["rating"] is None
    assert assignment["trainerName"] == ""


def test_missing_fields(client):
    body = dict(BODY)
    del body["assignedTrainer"]
    res = client.post("/training-assignments", json=body)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required field: assignedTrainer"


def test_filter_by_trainer(client):
    client.post("/training-assignments", json=BODY)
    client.post("/training-assignments", json={**BODY, "assignedTrainer": "trainer-2"})

    mine = client.get("/training-assignments", params={"trainerId": "trainer-1"}).json()["assignments"]
    assert len(mine) == 1
    assert len(client.get("/training-assignments").json()["assignments"]) == 2


def test_complete_with_rating(client):
    assignment_id = client.post("/training-assignments", json=BODY).json()["assignment"]["id"]

    res = client.patch(f"/training-assignments/{assignment_id}", json={"rating": 6})
    assert res.status_code == 400

    res = client.patch(
        f"/training-assignments/{assignment_id}",
        json={"status": "completed", "rating": 5, "comments": "Solid"},
    )
    assert res.status_code == 200
    assert res.json()["assignment"]["rating"] == 5
    assert res.json()["assignment"]["status"] == "completed"
