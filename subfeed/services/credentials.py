import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from ..config import settings
from ..models import Credential

logger = logging.getLogger(__name__)

TOKEN_KEY = "youtube_access_token"
EXPIRY_KEY = "youtube_token_expiry"


class CredentialError(Exception):
    pass


class NoCredential(CredentialError):
    pass


class CredentialExpired(CredentialError):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _from_epoch_ms(raw) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


class CredentialStore:
    """The single access token the upstream calls run under.

    There is no refresh: once the token expires (or upstream rejects it) the
    user has to go through the redirect flow again.
    """

    def __init__(
        self,
        state,
        clock: Callable[[], datetime] = utc_now,
        margin: timedelta = settings.TOKEN_EXPIRY_MARGIN,
    ):
        self._state = state
        self._clock = clock
        self.margin = margin

    def current(self) -> Optional[Credential]:
        """The stored credential, usable or not. None if no token is stored."""
        token = self._state.read(TOKEN_KEY)
        if not token:
            return None
        raw_expiry = self._state.read(EXPIRY_KEY)
        expires_at = None
        if raw_expiry is not None:
            expires_at = _from_epoch_ms(raw_expiry)
            if expires_at is None:
                logger.warning(f"Ignoring unreadable token expiry: {raw_expiry!r}")
        return Credential(token=token, expires_at=expires_at)

    def require(self) -> Credential:
        credential = self.current()
        if credential is None:
            raise NoCredential("No access token stored")
        if credential.expires_at is None:
            logger.warning("No token expiry found, assuming token is valid")
        if not credential.is_usable(self._clock(), self.margin):
            raise CredentialExpired(f"Access token expired at {credential.expires_at.isoformat()}")
        return credential

    def is_usable(self) -> bool:
        try:
            self.require()
        except CredentialError as e:
            logger.info(f"Credential not usable: {e}")
            return False
        return True

    def store(self, token: str, ttl_seconds: int = settings.DEFAULT_TOKEN_TTL) -> Credential:
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        self._state.write(TOKEN_KEY, token)
        self._state.write(EXPIRY_KEY, _to_epoch_ms(expires_at))
        logger.info(f"Access token stored, expires at {expires_at.isoformat()}")
        return Credential(token=token, expires_at=expires_at)

    def invalidate(self) -> None:
        self._state.clear(TOKEN_KEY)
        self._state.clear(EXPIRY_KEY)
        logger.info("Access token cleared")
