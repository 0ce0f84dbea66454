import pytest


@pytest.mark.parametrize("collection", ["trainers", "examiners"])
def test_create_and_list(client, collection):
    res = client.post(f"/{collection}", json={"jalId": "JAL001", "name": "First Officer"})
    assert res.status_code == 200
    person = res.json()[collection[:-1]]
    assert person["active"] is True
    assert person["status"] == "active"
    assert person["currentAssignments"] == 0
    assert person["maxAssignments"] == 5

    listed = client.get(f"/{collection}").json()[collection]
    assert [p["id"] for p in listed] == [person["id"]]


@pytest.mark.parametrize("collection", ["trainers", "examiners"])
def test_duplicate_jal_id(client, collection):
    client.post(f"/{collection}", json={"jalId": "JAL001", "name": "A"})
    res = client.post(f"/{collection}", json={"jalId": "JAL001", "name": "B"})
    assert res.status_code == 400
    assert "already exists" in res.json()["error"]


def test_update_trainer(client):
    trainer_id = client.post("/trainers", json={"jalId": "JAL001", "name": "A"}).json()["trainer"]["id"]

    res = client.patch(
        f"/trainers/{trainer_id}",
        json={"status": "busy", "maxAssignments": 3, "lastUpdatedBy": "ops"},
    )
    assert res.status_code == 200
    trainer = res.json()["trainer"]
    assert trainer["status"] == "busy"
    assert trainer["maxAssignments"] == 3


def test_update_trainer_validation(client):
    trainer_id = client.post("/trainers", json={"jalId": "JAL001", "name": "A"}).json()["trainer"]["id"]

    res = client.patch(f"/trainers/{trainer_id}", json={"lastUpdatedBy": "ops"})
    assert res.status_code == 400
    assert res.json()["error"] == "No valid fields to update"

    res = client.patch(f"/trainers/{trainer_id}", json={"status": "sleeping"})
    assert res.status_code == 400

    res = client.patch("/trainers/not-an-id", json={"active": False})
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid trainer ID"

    res = client.patch("/trainers/0123456789abcdef01234567", json={"active": False})
    assert res.status_code == 404


def test_delete_examiner(client):
    examiner_id = client.post("/examiners", json={"jalId": "JAL009", "name": "E"}).json()["examiner"]["id"]
    assert client.delete(f"/examiners/{examiner_id}").status_code == 200
    assert client.delete(f"/examiners/{examiner_id}").status_code == 404


def test_recount_rebuilds_counter(client, mock_db):
    trainer_id = client.post("/trainers", json={"jalId": "JAL001", "name": "A"}).json()["trainer"]["id"]
    mock_db.training_requests.insert_many([
        {"assignedTrainerId": trainer_id, "status": "assigned"},
        {"assignedTrainerId": trainer_id, "status": "in-progress"},
        {"assignedTrainerId": trainer_id, "status": "completed"},
    ])
    mock_db.trainers.update_one({"jalId": "JAL001"}, {"$set": {"currentAssignments": 7}})

    res = client.post(f"/trainers/{trainer_id}/recount")
    assert res.status_code == 200
    assert res.json()["currentAssignments"] == 2
    assert mock_db.trainers.find_one({"jalId": "JAL001"})["currentAssignments"] == 2


def test_examiners_have_no_recount(client):
    examiner_id = client.post("/examiners", json={"jalId": "JAL009", "name": "E"}).json()["examiner"]["id"]
    assert client.post(f"/examiners/{examiner_id}/recount").status_code in (404, 405)
