"""
Per-client session state: the WebUI SID cookie, its expiry, and the cached
server version classification.

SessionState is owned by a single QBittorrentClient. Only the Authenticator
writes to it; the dispatcher and the version policy read it.
"""

import datetime
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from typing import Dict, Optional

from .logger import logger
from .utils import is_greater


SID_COOKIE_NAME = "SID"
DEFAULT_SESSION_LIFETIME = datetime.timedelta(hours=1)
VERSION_5_BASELINE = "5.0.0"
_COOKIE_ATTRIBUTES = {"expires": "Expires", "max-age": "Max-Age"}


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass
class AuthState:
    sid: str
    expires: datetime.datetime


@dataclass(frozen=True)
class VersionInfo:
    # Raw value from /app/version, e.g. "v5.0.5"
    application: str
    is_v5_or_higher: bool


class SessionState:
    """Mutable auth and version cache for one client instance."""

    def __init__(self):
        self.auth: Optional[AuthState] = None
        self.version: Optional[VersionInfo] = None

    @property
    def sid(self) -> Optional[str]:
        return self.auth.sid if self.auth else None

    def is_authenticated(self, now: Optional[datetime.datetime] = None) -> bool:
        """True if a SID is held and it has not expired yet."""
        if not self.auth or not self.auth.sid or not self.auth.expires:
            return False
        return self.auth.expires > (now or utcnow())

    def clear(self) -> None:
        self.auth = None
        self.version = None


def parse_set_cookie(directive: str) -> Dict[str, str]:
    """
    Parse a single Set-Cookie directive into a flat dict.

    Every name=value part becomes an entry (split on the first "="); flags
    without a value, such as HttpOnly or Partitioned, are skipped. Expires
    and Max-Age are stored under those exact keys whatever their case.
    Returns an empty dict for directives without any name=value part.
    """
    result = {}
    for part in directive.split(";"):
        name, sep, value = part.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]

        key = _COOKIE_ATTRIBUTES.get(name.lower(), name)
        # First occurrence wins
        if key not in result:
            result[key] = value
    return result


def compute_expiry(cookie: Dict[str, str], now: Optional[datetime.datetime] = None) -> datetime.datetime:
    """Expires wins over Max-Age; without either the session lasts one hour."""
    now = now or utcnow()

    expires = cookie.get("Expires")
    if expires:
        try:
            value = parsedate_to_datetime(expires)
            if value.tzinfo is None:
                value = value.replace(tzinfo=datetime.timezone.utc)
            return value
        except (TypeError, ValueError):
            logger.debug(f"Ignoring malformed cookie Expires attribute: {expires}")

    max_age = cookie.get("Max-Age")
    if max_age:
        try:
            return now + datetime.timedelta(seconds=int(max_age))
        except ValueError:
            logger.debug(f"Ignoring malformed cookie Max-Age attribute: {max_age}")

    return now + DEFAULT_SESSION_LIFETIME


def classify_version(raw_version: str) -> VersionInfo:
    """
    Classify a /app/version string against the 5.0.0 baseline.

    A leading 'v' and any '-suffix' build metadata are ignored, so
    "v5.0.0-beta1" counts as 5.0.0.
    """
    clean = raw_version.strip()
    if clean.startswith("v"):
        clean = clean[1:]
    clean = clean.split("-", 1)[0]

    return VersionInfo(
        application=raw_version,
        is_v5_or_higher=clean == VERSION_5_BASELINE or is_greater(clean, VERSION_5_BASELINE),
    )
