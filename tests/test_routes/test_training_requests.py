import pytest
from bson import ObjectId

from trainingdesk.errors import Conflict
from trainingdesk.services import assignments


def _trainer(client, jal_id, **extra):
    body = {"jalId": jal_id, "name": f"Trainer {jal_id}", **extra}
    return client.post("/trainers", json=body).json()["trainer"]["id"]


def _request(client):
    body = {
        "pilotId": "JAL500",
        "pilotName": "Cadet",
        "topicId": "t1",
        "topicName": "Crosswind landings",
        "requestedDate": "2026-11-01",
        "requestedTime": "18:00",
    }
    return client.post("/training-requests", json=body).json()["request"]["id"]


def _load(mock_db, trainer_id):
    return mock_db.trainers.find_one({"_id": ObjectId(trainer_id)})["currentAssignments"]


def test_create_request(client):
    request_id = _request(client)
    requests = client.get("/training-requests").json()["requests"]
    assert requests[0]["id"] == request_id
    assert requests[0]["status"] == "pending"
    assert requests[0]["assignedTrainerId"] is None
    assert requests[0]["comments"] == ""


def test_create_request_validation(client):
    res = client.post("/training-requests", json={"pilotId": "JAL500"})
    assert res.status_code == 400
    assert res.json()["error"].startswith("Missing required field: ")


def test_assign_increments_trainer(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)

    res = client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 200
    assert res.json()["request"]["status"] == "assigned"
    assert res.json()["request"]["assignedTrainerName"] == "Trainer JAL001"
    assert _load(mock_db, trainer_id) == 1


def test_assign_ignores_availability(client, mock_db):
    trainer_id = _trainer(client, "JAL001", maxAssignments=0)
    request_id = _request(client)

    res = client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 200
    assert _load(mock_db, trainer_id) == 1


def test_pickup_at_capacity_changes_nothing(client, mock_db):
    trainer_id = _trainer(client, "JAL001", maxAssignments=1)
    mock_db.trainers.update_one({"_id": ObjectId(trainer_id)}, {"$set": {"currentAssignments": 1}})
    request_id = _request(client)

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Trainer is not available for pickup"}

    assert _load(mock_db, trainer_id) == 1
    stored = mock_db.training_requests.find_one({"_id": ObjectId(request_id)})
    assert stored["status"] == "pending"
    assert stored["assignedTrainerId"] is None


def test_pickup_by_busy_trainer(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    client.patch(f"/trainers/{trainer_id}", json={"status": "busy"})
    request_id = _request(client)

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 400
    assert _load(mock_db, trainer_id) == 0


def test_pickup_moves_load_between_trainers(client, mock_db):
    first = _trainer(client, "JAL001")
    second = _trainer(client, "JAL002")
    request_id = _request(client)
    client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": first})

    res = client.post(
        "/training-requests/pickup",
        json={"assignmentId": request_id, "trainerId": second, "trainerName": "Second"},
    )
    assert res.status_code == 200
    assert res.json()["request"]["assignedTrainerId"] == second
    assert res.json()["request"]["assignedTrainerName"] == "Second"
    assert _load(mock_db, first) == 0
    assert _load(mock_db, second) == 1


def test_pickup_own_request_rejected(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": trainer_id})

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 400
    assert _load(mock_db, trainer_id) == 1


def test_pickup_unknown_records(client):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    missing = "0123456789abcdef01234567"

    res = client.post("/training-requests/pickup", json={"assignmentId": missing, "trainerId": trainer_id})
    assert res.status_code == 404
    assert res.json()["error"] == "Assignment not found"

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": missing})
    assert res.status_code == 404
    assert res.json()["error"] == "Trainer not found"

    res = client.post("/training-requests/pickup", json={"assignmentId": "bad", "trainerId": trainer_id})
    assert res.status_code == 400


def test_stale_pickup_conflicts_and_restores_counter(client, mock_db):
    first = _trainer(client, "JAL001")
    second = _trainer(client, "JAL002")
    request_id = _request(client)

    # both trainers read the request while it is still pending
    snapshot = assignments.load_request(mock_db, request_id)

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": first})
    assert res.status_code == 200

    with pytest.raises(Conflict):
        assignments.transfer(
            mock_db, snapshot, assignments.load_trainer(mock_db, second), check_availability=True,
        )

    assert _load(mock_db, first) == 1
    assert _load(mock_db, second) == 0
    stored = mock_db.training_requests.find_one({"_id": ObjectId(request_id)})
    assert stored["assignedTrainerId"] == first


def test_stale_trainer_counter_conflicts(client, mock_db):
    trainer_id = _trainer(client, "JAL001", maxAssignments=1)
    request_a = _request(client)
    request_b = _request(client)

    trainer_snapshot = assignments.load_trainer(mock_db, trainer_id)
    client.post("/training-requests/pickup", json={"assignmentId": request_a, "trainerId": trainer_id})

    with pytest.raises(Conflict):
        assignments.transfer(
            mock_db, assignments.load_request(mock_db, request_b), trainer_snapshot, check_availability=True,
        )
    assert _load(mock_db, trainer_id) == 1


def test_conflict_surfaces_as_409(client, mock_db, monkeypatch):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    monkeypatch.setattr(assignments, "_claim_request", lambda *args: False)

    res = client.post("/training-requests/pickup", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 409
    assert res.json()["success"] is False
    assert _load(mock_db, trainer_id) == 0


def test_reassign_requires_admin(client, trainer_headers):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    body = {"assignmentId": request_id, "trainerId": trainer_id}

    assert client.post("/training-requests/reassign", json=body).status_code == 401
    assert client.post("/training-requests/reassign", json=body, headers=trainer_headers).status_code == 403


def test_reassign_moves_load(client, mock_db, admin_headers):
    first = _trainer(client, "JAL001")
    second = _trainer(client, "JAL002", maxAssignments=0)
    request_id = _request(client)
    client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": first})

    res = client.post(
        "/training-requests/reassign",
        json={"assignmentId": request_id, "trainerId": second},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert _load(mock_db, first) == 0
    assert _load(mock_db, second) == 1
    assert mock_db.activity_logs.find_one({"action": "training_request_reassigned"})["user_id"] == "admin"


def test_status_lifecycle_releases_load(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": trainer_id})

    res = client.patch(f"/training-requests/{request_id}", json={"status": "in-progress"})
    assert res.status_code == 200
    assert _load(mock_db, trainer_id) == 1

    res = client.patch(f"/training-requests/{request_id}", json={"status": "completed"})
    assert res.status_code == 200
    assert res.json()["request"]["status"] == "completed"
    assert "completedAt" in res.json()["request"]
    assert _load(mock_db, trainer_id) == 0

    res = client.patch(f"/training-requests/{request_id}", json={"status": "cancelled"})
    assert res.status_code == 400

    res = client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": trainer_id})
    assert res.status_code == 400


def test_unassign_back_to_pending(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)
    client.post("/training-requests/assign", json={"assignmentId": request_id, "trainerId": trainer_id})

    res = client.patch(f"/training-requests/{request_id}", json={"status": "pending"})
    assert res.status_code == 200
    assert res.json()["request"]["assignedTrainerId"] is None
    assert _load(mock_db, trainer_id) == 0


def test_invalid_transitions(client):
    request_id = _request(client)

    res = client.patch(f"/training-requests/{request_id}", json={"status": "completed"})
    assert res.status_code == 400
    assert res.json()["error"] == "Cannot move training request from pending to completed"

    res = client.patch(f"/training-requests/{request_id}", json={"status": "done"})
    assert res.status_code == 400


def test_list_filters(client):
    trainer_id = _trainer(client, "JAL001")
    assigned = _request(client)
    _request(client)
    client.post("/training-requests/assign", json={"assignmentId": assigned, "trainerId": trainer_id})

    by_status = client.get("/training-requests", params={"status": "pending"}).json()["requests"]
    assert len(by_status) == 1

    by_trainer = client.get("/training-requests", params={"trainerId": trainer_id}).json()["requests"]
    assert [r["id"] for r in by_trainer] == [assigned]


def test_inactivated_trainer_cannot_take_slot(client, mock_db):
    trainer_id = _trainer(client, "JAL001")
    request_id = _request(client)

    trainer_snapshot = assignments.load_trainer(mock_db, trainer_id)
    mock_db.trainers.update_one({"_id": ObjectId(trainer_id)}, {"$set": {"active": False}})

    with pytest.raises(Conflict):
        assignments.transfer(
            mock_db, assignments.load_request(mock_db, request_id), trainer_snapshot, check_availability=True,
        )
    assert _load(mock_db, trainer_id) == 0
    assert mock_db.training_requests.find_one({"_id": ObjectId(request_id)})["status"] == "pending"
