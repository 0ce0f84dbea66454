import httpx
import pytest

from trainingdesk.errors import NotAuthenticated
from trainingdesk.services.identity import IdentityGateway
from trainingdesk.services.roles import ROLE_DEFINITIONS, permissions_for
from trainingdesk.utils.ids import parse_iso, prefixed_id, timestamp_id
from trainingdesk.utils.logger import sanitize


def _gateway(handler, admin_key=None):
    return IdentityGateway(
        base_url="https://airline.test/api/",
        admin_key=admin_key,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_bearer_fallback():
    def bearer_only(request):
        if request.headers.get("authorization") == "Bearer k1":
            return httpx.Response(200, json={"id": 7, "name": "Bearer Pilot"})
        return httpx.Response(401)

    user = _gateway(bearer_only).authenticate("k1")
    assert user["id"] == "7"
    assert user["name"] == "Bearer Pilot"
    assert user["role"] == "Staff"
    assert user["permissions"] == []


def test_upstream_rejection_does_not_promote_unknown_key():
    gateway = _gateway(lambda request: httpx.Response(503), admin_key="svc")
    with pytest.raises(NotAuthenticated):
        gateway.authenticate("someone")
    assert gateway.authenticate("svc")["role"] == "Admin"


def test_base_url_trailing_slash():
    seen = []

    def record(request):
        seen.append(str(request.url))
        return httpx.Response(200, json={"data": {"id": 1}})

    _gateway(record).authenticate("k")
    assert seen == ["https://airline.test/api/user"]


def test_map_profile_defaults():
    profile = IdentityGateway.map_profile({"data": {"id": 3, "rank_id": 2}})
    assert profile["name"] == "JAL Pilot"
    assert profile["pilotId"] == "3"
    assert profile["rank"] == 2
    assert IdentityGateway.map_profile("garbage")["id"] == "unknown"


def test_permissions_follow_role_table():
    for role, definition in ROLE_DEFINITIONS.items():
        assert permissions_for(role) == definition["permissions"]
    assert permissions_for("Staff") == []


def test_sanitize_masks_credentials():
    clean = sanitize({"apiKey": "abcdefghijkl", "token": "XYZ", "name": "ok"})
    assert clean == {"apiKey": "abcdefgh...", "token": "XYZ...", "name": "ok"}
    assert sanitize("x" * 250).endswith("...")


def test_ids_are_unique_and_ordered():
    ids = [timestamp_id() for _ in range(50)]
    assert len(set(ids)) == 50
    assert [int(i) for i in ids] == sorted(int(i) for i in ids)
    assert prefixed_id("quiz").startswith("quiz_")


def test_parse_iso_accepts_zulu():
    assert parse_iso("2026-01-01T00:00:00Z").utcoffset().total_seconds() == 0
    assert parse_iso("2026-01-01T00:00:00").tzinfo is not None
    assert parse_iso(None) is None
