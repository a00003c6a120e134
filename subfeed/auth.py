import logging
from typing import Optional
from urllib.parse import parse_qs
from .config import settings
from .models import Credential
from .services.credentials import CredentialStore

logger = logging.getLogger(__name__)


class AuthorizationDenied(Exception):
    def __init__(self, error: str, description: str = ""):
        super().__init__(f"{error}: {description}" if description else error)
        self.error = error
        self.description = description


def complete_authorization(fragment: str, store: CredentialStore) -> Optional[Credential]:
    """Stores the token carried by an implicit-grant redirect fragment.

    `fragment` is the part of the redirect URL after '#'. Returns None when
    it carries neither a token nor an error.
    """
    params = parse_qs(fragment.lstrip("#"))

    error = params.get("error", [None])[0]
    if error:
        description = params.get("error_description", [""])[0]
        logger.error(f"Authorization failed: {error} {description}".rstrip())
        store.invalidate()
        raise AuthorizationDenied(error, description)

    access_token = params.get("access_token", [None])[0]
    if not access_token:
        return None

    raw_expires_in = params.get("expires_in", [None])[0]
    try:
        expires_in = int(raw_expires_in)
    except (TypeError, ValueError):
        logger.warning(f"No usable expires_in ({raw_expires_in!r}), defaulting to {settings.DEFAULT_TOKEN_TTL}s")
        expires_in = settings.DEFAULT_TOKEN_TTL

    return store.store(access_token, expires_in)
