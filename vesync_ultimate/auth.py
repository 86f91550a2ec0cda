"""Session management for the VeSync Ultimate client."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .capabilities import Variant
from .const import (
    APP_VERSION,
    BYPASS_CONTENT_TYPE,
    BYPASS_USER_AGENT,
    DEFAULT_LANGUAGE,
    DEFAULT_LOGIN_ATTEMPTS,
    DEFAULT_REGION,
    DEFAULT_TIME_ZONE,
    FATAL_LOGIN_ERROR_CODES,
    LOGIN_PATH,
    MOBILE_ID,
    PHONE_BRAND,
    PHONE_OS,
    USER_TYPE,
)
from .envelope import classify
from .errors import VeSyncAuthError, VeSyncSessionError
from .rest_client import VeSyncRestClient

_LOGGER = logging.getLogger(__name__)

_BACKOFF_BASE = 1.0
_BACKOFF_MAX = 8.0


def _trace_id() -> str:
    return str(int(time.time() * 1000))


def hash_password(password: str) -> str:
    """Return the md5 digest the login endpoint expects."""

    return hashlib.md5(password.encode("utf-8")).hexdigest()


def base_body(kind: str, time_zone: str = DEFAULT_TIME_ZONE) -> dict[str, Any]:
    """Return the body fields shared by every authenticated request."""

    body: dict[str, Any] = {
        "acceptLanguage": DEFAULT_LANGUAGE,
        "appVersion": APP_VERSION,
        "phoneBrand": PHONE_BRAND,
        "phoneOS": PHONE_OS,
        "timeZone": time_zone,
        "traceId": _trace_id(),
    }
    if kind == "login":
        body.update(
            {"method": "login", "userType": USER_TYPE, "devToken": ""}
        )
    return body


def bypass_headers() -> dict[str, str]:
    """Return the headers used by the bypass endpoints."""

    return {
        "Content-Type": BYPASS_CONTENT_TYPE,
        "User-Agent": BYPASS_USER_AGENT,
    }


@dataclass(frozen=True)
class Session:
    """Credentials issued by a successful login."""

    account_id: str
    token: str
    time_zone: str = DEFAULT_TIME_ZONE
    country_code: str = DEFAULT_REGION

    @classmethod
    def from_login_payload(
        cls, payload: Mapping[str, Any], time_zone: str = DEFAULT_TIME_ZONE
    ) -> Session:
        """Create a session from the login ``result`` payload."""

        return cls(
            account_id=str(payload["accountID"]),
            token=str(payload["token"]),
            time_zone=time_zone,
            country_code=str(payload.get("countryCode") or DEFAULT_REGION),
        )

    def request_headers(self) -> dict[str, str]:
        """Return the headers for account level endpoints."""

        return {
            "accept-language": DEFAULT_LANGUAGE,
            "accountId": self.account_id,
            "appVersion": APP_VERSION,
            "content-type": "application/json",
            "tk": self.token,
            "tz": self.time_zone,
        }

    def request_body(self, kind: str) -> dict[str, Any]:
        """Return the request body skeleton for ``kind``."""

        body = base_body(kind, self.time_zone)
        body.update({"accountID": self.account_id, "token": self.token})
        if kind == "devicelist":
            body.update({"method": "devices", "pageNo": "1", "pageSize": "100"})
        elif kind == "devicedetail":
            body.update({"method": "devicedetail", "mobileId": MOBILE_ID})
        elif kind == "devicestatus":
            body.update({"method": "devicestatus"})
        elif kind == "bypass":
            body.update({"method": "bypass"})
        elif kind == "bypassV2":
            body.update(
                {
                    "deviceRegion": self.country_code,
                    "method": "bypassV2",
                    "debugMode": False,
                }
            )
        return body

    def __repr__(self) -> str:
        return f"Session(account_id={self.account_id!r}, time_zone={self.time_zone!r})"


class VeSyncAuthManager:
    """Manage the login lifecycle for one account."""

    def __init__(self, rest_client: VeSyncRestClient) -> None:
        self._rest_client = rest_client
        self._session: Session | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session | None:
        """Return the active session."""

        return self._session

    def require_session(self) -> Session:
        """Return the active session or raise when logged out."""

        if self._session is None:
            raise VeSyncSessionError("Not logged in")
        return self._session

    async def async_login(
        self,
        username: str,
        password: str,
        *,
        time_zone: str = DEFAULT_TIME_ZONE,
        attempts: int = DEFAULT_LOGIN_ATTEMPTS,
    ) -> Session:
        """Log in and store the resulting session.

        Rejections carrying a credential, region, token or app-version code
        are raised at once. Other failures are retried with exponential
        backoff until ``attempts`` is exhausted.
        """

        async with self._lock:
            last_code: int | None = None
            for attempt in range(attempts):
                if attempt:
                    delay = min(_BACKOFF_BASE * 2 ** (attempt - 1), _BACKOFF_MAX)
                    _LOGGER.debug("Retrying login in %.1fs", delay)
                    await asyncio.sleep(delay)
                session, last_code = await self._attempt_login(
                    username, password, time_zone
                )
                if session is not None:
                    self._session = session
                    return session
                if last_code in FATAL_LOGIN_ERROR_CODES:
                    self._session = None
                    raise VeSyncAuthError(
                        f"Login rejected with code {last_code}", last_code
                    )
            self._session = None
            raise VeSyncAuthError(
                f"Login failed after {attempts} attempts", last_code
            )

    async def async_logout(self) -> None:
        """Forget the current session."""

        async with self._lock:
            self._session = None

    async def _attempt_login(
        self, username: str, password: str, time_zone: str
    ) -> tuple[Session | None, int | None]:
        body = base_body("login", time_zone)
        body.update({"email": username, "password": hash_password(password)})
        payload, status = await self._rest_client.async_call(
            LOGIN_PATH, "post", body, {"content-type": "application/json"}
        )
        outcome = classify(status, payload, Variant.LEGACY_FLAT)
        if not outcome.success:
            _LOGGER.warning(
                "Login failed (HTTP %s, code %s)", status, outcome.vendor_error_code
            )
            return None, outcome.vendor_error_code
        result = payload.get("result") if isinstance(payload, Mapping) else None
        if not isinstance(result, Mapping) or not result.get("token"):
            _LOGGER.warning("Login response did not include a token")
            return None, None
        if not result.get("accountID"):
            _LOGGER.warning("Login response did not include an account id")
            return None, None
        return Session.from_login_payload(result, time_zone), None
