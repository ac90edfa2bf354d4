"""Admin authentication: a shared password and a timestamped session.

Sessions are plain values passed to whoever needs them; expiry is checked
against a caller-supplied ``now`` so tests control the clock.
"""

from __future__ import annotations

import datetime
import hmac
import os
from dataclasses import dataclass
from typing import Any

from ffl.constants import ADMIN_SESSION_TTL_SEC

ADMIN_PASSWORD = os.environ.get("FFL_ADMIN_PASSWORD", "")
SESSION_TTL = datetime.timedelta(seconds=ADMIN_SESSION_TTL_SEC)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    # naive datetimes are taken to be UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment


@dataclass(slots=True, frozen=True)
class AdminSession:
    authenticated: bool
    issued_at: datetime.datetime

    def is_valid(self, now: datetime.datetime | None = None) -> bool:
        now = _as_utc(now or _utcnow())
        if now - _as_utc(self.issued_at) > SESSION_TTL:
            return False
        return self.authenticated

    def to_dict(self) -> dict[str, Any]:
        return {"authenticated": self.authenticated, "timestamp": self.issued_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> AdminSession | None:
        """Rebuild a stored session; malformed data yields ``None``."""
        try:
            issued = datetime.datetime.fromisoformat(str(data["timestamp"]))
        except (KeyError, TypeError, ValueError):
            return None
        return cls(authenticated=data.get("authenticated") is True, issued_at=_as_utc(issued))


def authenticate_admin(
    password: str,
    *,
    admin_password: str | None = None,
    now: datetime.datetime | None = None,
) -> AdminSession | None:
    """Return a fresh session when ``password`` matches the configured admin password."""
    expected = ADMIN_PASSWORD if admin_password is None else admin_password
    if not expected or not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        return None
    return AdminSession(authenticated=True, issued_at=now or _utcnow())


def check_admin_session(session: AdminSession | None, now: datetime.datetime | None = None) -> bool:
    return session is not None and session.is_valid(now)
