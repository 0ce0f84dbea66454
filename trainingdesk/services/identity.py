"""
Identity verification against the airline operations API.

The upstream is a phpVMS-style API: ``GET {base}/user`` authenticated with
``X-API-Key`` (some instances accept ``Authorization: Bearer`` instead) and
answering ``{"data": {...profile...}}``.
"""
from __future__ import annotations

import hmac
from typing import Any, Dict, Optional, Tuple

import httpx
from fastapi import Request

from trainingdesk import settings
from trainingdesk.db import STAFF
from trainingdesk.errors import NotAuthenticated
from trainingdesk.services.roles import permissions_for
from trainingdesk.utils.logger import get_logger

logger = get_logger(__name__)

PROBE_ENDPOINTS = ("/user", "/ping")
DEFAULT_ROLE = "Staff"

ADMIN_IDENTITY = {
    "id": "admin",
    "pilotId": "admin",
    "name": "Administrator",
    "email": None,
    "rank": "Administrator",
    "homeAirport": None,
    "currentAirport": None,
    "country": None,
}


class UpstreamUnavailable(Exception):
    """The airline API could not be reached at all."""


class IdentityGateway:
    """Thin client for the airline API plus the service-account fallback."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        admin_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.AIRLINE_API_BASE_URL).rstrip("/")
        self.admin_key = admin_key
        self.client = client or httpx.Client(timeout=settings.UPSTREAM_TIMEOUT_S)

    # --- transport -----------------------------------------------------------
    def _headers(self, credential: str, scheme: str) -> Dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": settings.USER_AGENT}
        if scheme == "bearer":
            headers["Authorization"] = f"Bearer {credential}"
        else:
            headers["X-API-Key"] = credential
        return headers

    def _get(self, endpoint: str, credential: str, scheme: str) -> httpx.Response:
        try:
            return self.client.get(f"{self.base_url}{endpoint}", headers=self._headers(credential, scheme))
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(str(e)) from e

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    # --- service account -----------------------------------------------------
    def is_service_account(self, credential: str) -> bool:
        if not self.admin_key or not credential:
            return False
        return hmac.compare_digest(credential.encode(), self.admin_key.encode())

    # --- profile mapping -----------------------------------------------------
    @staticmethod
    def map_profile(body: Any) -> Dict[str, Any]:
        data = body.get("data", body) if isinstance(body, dict) else {}
        if not isinstance(data, dict):
            data = {}
        rank = data.get("rank")
        if isinstance(rank, dict):
            rank = rank.get("name")
        airline = data.get("airline") if isinstance(data.get("airline"), dict) else {}
        user_id = data.get("id") or data.get("pilot_id") or "unknown"
        return {
            "id": str(user_id),
            "pilotId": str(data.get("pilot_id") or data.get("ident") or user_id),
            "name": data.get("name") or data.get("display_name") or "JAL Pilot",
            "email": data.get("email"),
            "rank": rank or data.get("rank_id") or "Pilot",
            "homeAirport": data.get("home_airport"),
            "currentAirport": data.get("curr_airport"),
            "country": data.get("country") or airline.get("country"),
        }

    def _fetch_profile(self, credential: str) -> Optional[Dict[str, Any]]:
        """Profile for ``credential``, ``None`` when the upstream says no."""
        for scheme in ("x-api-key", "bearer"):
            response = self._get("/user", credential, scheme)
            logger.debug("Identity lookup via %s -> %s", scheme, response.status_code)
            if response.is_success:
                return self.map_profile(self._body(response))
            if response.status_code != 401:
                break
        return None

    # --- public operations ---------------------------------------------------
    def authenticate(self, credential: str, db=None) -> Dict[str, Any]:
        """
        Resolve a credential into a local user view with role and permissions.
        Falls back to the service account only when the upstream fails.
        """
        try:
            profile = self._fetch_profile(credential)
        except UpstreamUnavailable as e:
            logger.warning("Airline API unreachable: %s", e)
            profile = None

        if profile is None:
            if self.is_service_account(credential):
                logger.info("Service-account login")
                return {**ADMIN_IDENTITY, "role": "Admin", "permissions": permissions_for("Admin")}
            raise NotAuthenticated("Invalid API key")

        role = DEFAULT_ROLE
        if db is not None:
            staff = db[STAFF].find_one({"apiKey": credential})
            if staff and staff.get("role"):
                role = staff["role"]
        return {**profile, "role": role, "permissions": permissions_for(role)}

    def probe(self, credential: str) -> Tuple[int, Dict[str, Any]]:
        """
        Raw verification used by staff onboarding screens.
        Returns (status_code, body) with ``ok`` instead of ``success``.
        """
        try:
            for scheme in ("x-api-key", "bearer"):
                for endpoint in PROBE_ENDPOINTS:
                    response = self._get(endpoint, credential, scheme)
                    body = self._body(response)
                    if response.is_success:
                        label = "X-API-Key" if scheme == "x-api-key" else "Bearer"
                        return 200, {"ok": True, "user": body, "via": f"{label} {endpoint}"}
                    if response.status_code != 401:
                        return 502, {
                            "ok": False,
                            "error": "Upstream rejected",
                            "status": response.status_code,
                            "details": body,
                        }
        except UpstreamUnavailable as e:
            logger.warning("Airline API unreachable during verify: %s", e)
            if self.is_service_account(credential):
                return 200, {"ok": True, "user": dict(ADMIN_IDENTITY), "via": "service-account"}
            return 500, {"ok": False, "error": "Failed to verify API key. Please check and try again."}

        return 401, {
            "ok": False,
            "error": "Unauthorized (invalid API key or wrong auth method). Tried X-API-Key and Bearer on /user & /ping.",
        }

    def verify_credential(self, credential: str) -> bool:
        """True when the upstream knows the credential or it is the service account."""
        try:
            if self._fetch_profile(credential) is not None:
                return True
        except UpstreamUnavailable as e:
            logger.warning("Airline API unreachable while verifying staff credential: %s", e)
        return self.is_service_account(credential)

    def close(self):
        self.client.close()


def get_identity_gateway(request: Request) -> IdentityGateway:
    return request.app.state.identity
