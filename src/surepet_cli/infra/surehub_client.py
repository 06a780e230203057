"""httpx-backed implementation of :class:`~surepet_cli.core.protocols.ApiSession`.

This module is the **only** place in the codebase that calls into
``httpx``.  All httpx exceptions and non-success statuses are mapped to
typed :class:`~surepet_cli.exceptions.ApiError` subclasses here —
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from types import TracebackType
from typing import Any

import httpx

from surepet_cli.config import Settings
from surepet_cli.core.models import (
    Credential,
    Device,
    HistoryKind,
    HistoryRecord,
    Location,
    LockMode,
    Pet,
    PetClass,
    RangeSpec,
)
from surepet_cli.core.payloads import parse_devices, parse_history, parse_login, parse_pets
from surepet_cli.exceptions import (
    ApiError,
    ApiValidationError,
    AuthError,
    AuthRejectedError,
    MalformedResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)


def build_http_client(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an ``httpx.Client`` with the fixed per-request timeout."""
    return httpx.Client(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": settings.user_agent,
        },
        transport=transport,
    )


class SureHubClient:
    """Concrete :class:`ApiSession` for the SureHub cloud.

    One instance without a token performs the login exchange; instances
    bound to a credential via :meth:`bind` share the same connection
    pool and add the bearer header.

    Usage::

        with SureHubClient(settings) as root:
            token = root.login(email, password)
            pets = root.bind(credential).list_pets()
    """

    def __init__(
        self,
        settings: Settings,
        *,
        token: str | None = None,
        http: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings: Settings = settings
        self._token: str | None = token
        self._owns_http: bool = http is None
        self._http: httpx.Client = (
            http if http is not None else build_http_client(settings, transport=transport)
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def bind(self, credential: Credential) -> SureHubClient:
        """Return a session authenticated with *credential*."""
        return SureHubClient(self._settings, token=credential.token, http=self._http)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> SureHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Login exchange
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        """Exchange account credentials for a bearer token.

        Raises
        ------
        AuthError
            When the credentials are refused (HTTP 401/403).
        ApiError
            For rate limiting, server errors and transport failures.
        """
        body = {
            "email_address": email,
            "password": password,
            "device_id": self._settings.client_device_id,
        }
        try:
            payload = self._request(
                "POST",
                f"{self._settings.base_url}/auth/login",
                json=body,
                headers={"X-Device-Id": self._settings.client_device_id},
                authenticated=False,
            )
        except AuthRejectedError as exc:
            raise AuthError(
                "Invalid email address or password.",
                hint="Check the credentials you use in the SureHub app.",
            ) from exc
        return parse_login(payload)

    # ------------------------------------------------------------------
    # ApiSession
    # ------------------------------------------------------------------

    def list_pets(self) -> list[Pet]:
        return parse_pets(self._start())

    def list_devices(self) -> list[Device]:
        return parse_devices(self._start())

    def set_pet_location(self, pet_id: str, location: Location) -> None:
        self._request(
            "POST",
            f"{self._settings.base_url}/pet/{pet_id}/position",
            json={
                "where": location.value,
                "since": datetime.now(timezone.utc).isoformat(),
            },
        )

    def set_pet_class(
        self,
        pet_id: str,
        pet_class: PetClass,
        *,
        tag_id: str,
        flap_id: str,
    ) -> None:
        logger.debug("Setting profile of pet %s (tag %s) on flap %s", pet_id, tag_id, flap_id)
        self._request(
            "PUT",
            f"{self._settings.base_url}/device/{flap_id}/tag/{tag_id}",
            json={"profile": pet_class.value},
        )

    def set_lock_mode(self, device_id: str, mode: LockMode) -> None:
        self._control(device_id, {"locking": mode.value})

    def set_curfew(self, device_id: str, lock_time: str, unlock_time: str) -> None:
        self._control(
            device_id,
            {"curfew": [{"enabled": True, "lock_time": lock_time, "unlock_time": unlock_time}]},
        )

    def disable_curfew(self, device_id: str) -> None:
        self._control(device_id, {"curfew": []})

    def get_history(
        self,
        pet_id: str,
        kind: HistoryKind,
        window: RangeSpec,
    ) -> list[HistoryRecord]:
        payload = self._request(
            "GET",
            self._settings.dashboard_url,
            params={
                "Pet_Id": pet_id,
                "From": window.start.isoformat(),
                "dayshistory": str(window.days),
            },
        )
        records = parse_history(payload, pet_id, kind, window)
        logger.debug("%d %s records for pet %s", len(records), kind.value, pet_id)
        return records

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _start(self) -> Any:
        return self._request("GET", f"{self._settings.base_url}/me/start")

    def _control(self, device_id: str, body: Mapping[str, Any]) -> None:
        self._request(
            "PUT",
            f"{self._settings.base_url}/device/{device_id}/control",
            json=dict(body),
        )

    def _request(
        self,
        method: str,
        url: str,
        *,
        json: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        authenticated: bool = True,
    ) -> Any:
        request_headers = dict(headers or {})
        if authenticated:
            if not self._token:
                raise AuthRejectedError("No bearer token bound to this session.")
            request_headers["Authorization"] = f"Bearer {self._token}"

        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers=request_headers,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(
                "Request to SureHub timed out.",
                hint="Check your internet connection and try again.",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Cannot connect to SureHub: {exc}",
                hint="Check your internet connection and try again.",
            ) from exc

        logger.debug("Response status: %s", response.status_code)
        self._raise_for_status(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                "SureHub returned a response that is not valid JSON.",
                status_code=response.status_code,
            ) from exc

    # ------------------------------------------------------------------
    # Status mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Translate a non-2xx response into a domain exception."""
        status = response.status_code
        if response.is_success:
            return

        reason = response.reason_phrase or None
        if status in (401, 403):
            raise AuthRejectedError(
                "Authentication token has expired or is invalid.",
                status_code=status,
                reason=reason,
            )
        if status == 429:
            raise ApiError(
                "Too many requests to SureHub.",
                status_code=status,
                reason=reason,
                hint="Wait a few minutes before trying again.",
            )
        if 400 <= status < 500:
            raise ApiValidationError(
                f"SureHub rejected the request: {_error_detail(response)}",
                status_code=status,
                reason=reason,
            )
        raise ApiError(
            "SureHub service is temporarily unavailable.",
            status_code=status,
            reason=reason,
            hint="Try again in a minute.",
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return response.reason_phrase or f"HTTP {response.status_code}"
