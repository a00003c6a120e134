import asyncio
import json
import logging
from typing import Optional
import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import build_http
from google.oauth2.credentials import Credentials
from ..config import settings
from .credentials import CredentialStore

logger = logging.getLogger(__name__)

QUOTA_REASONS = {
    "quotaExceeded",
    "dailyLimitExceeded",
    "rateLimitExceeded",
    "userRateLimitExceeded",
}

SUBSCRIPTION_FIELDS = (
    "items(id,snippet(title,description,thumbnails/default/url,publishedAt,resourceId/channelId))"
)


class YouTubeServiceError(Exception):
    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class QuotaExceeded(YouTubeServiceError):
    """Daily or per-user quota used up. Retry later; the token is still good."""


class CredentialInvalid(YouTubeServiceError):
    """Upstream refused the token. The credential store has been cleared."""


class UpstreamError(YouTubeServiceError):
    pass


class PartialChannelFailure(YouTubeServiceError):
    def __init__(self, channel_id: str, cause: Exception):
        super().__init__(
            f"Fetching uploads for channel {channel_id} failed: {cause}",
            status=getattr(cause, "status", None),
        )
        self.channel_id = channel_id
        self.__cause__ = cause


def build_youtube(api_key: str = None):
    """Builds the YouTube Data API resource.

    No credentials are bound here; the bearer token is attached per request
    so a token stored or cleared later is picked up by the next call.
    """
    return build(
        "youtube",
        "v3",
        developerKey=(api_key if api_key is not None else settings.YOUTUBE_API_KEY) or None,
        http=build_http(),
        cache_discovery=False,
    )


def _error_payload(content) -> dict:
    if not content:
        return {}
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        data = json.loads(content)
    except ValueError:
        return {}
    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return {}
    return data["error"]


def _is_quota_error(payload: dict) -> bool:
    for detail in payload.get("errors") or []:
        if isinstance(detail, dict) and detail.get("reason") in QUOTA_REASONS:
            return True
    if payload.get("status") == "RESOURCE_EXHAUSTED":
        return True
    # Last resort when upstream sends no structured reason
    return "quota" in str(payload.get("message", "")).lower()


def classify_http_error(error: HttpError) -> YouTubeServiceError:
    status = error.resp.status
    payload = _error_payload(error.content)
    message = payload.get("message") or getattr(error.resp, "reason", None) or f"HTTP {status}"

    if status == 403:
        if _is_quota_error(payload):
            return QuotaExceeded(message, status=status)
        return CredentialInvalid(message, status=status)
    return UpstreamError(message, status=status)


class YouTubeClient:
    """The three read calls the feed is built from."""

    def __init__(self, credentials: CredentialStore, youtube=None):
        self._credentials = credentials
        self._youtube = youtube if youtube is not None else build_youtube()

    async def _execute(self, request, endpoint: str) -> dict:
        credential = self._credentials.current()
        if credential is not None:
            Credentials(token=credential.token).apply(request.headers)

        try:
            # execute() blocks; keep the event loop free while it runs
            return await asyncio.to_thread(request.execute)
        except HttpError as e:
            error = classify_http_error(e)
            logger.error(f"YouTube {endpoint} request failed ({error.status}): {error}")
            if isinstance(error, CredentialInvalid):
                self._credentials.invalidate()
            raise error from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"YouTube {endpoint} request could not be sent: {e}")
            raise UpstreamError(str(e)) from e

    async def list_my_subscriptions(self, max_results: int = settings.SUBSCRIPTIONS_PAGE_SIZE) -> dict:
        request = self._youtube.subscriptions().list(
            part="snippet",
            mine=True,
            maxResults=max_results,
            fields=SUBSCRIPTION_FIELDS,
        )
        return await self._execute(request, "subscriptions")

    async def get_channel_uploads_playlist_id(self, channel_id: str) -> Optional[str]:
        """Returns the channel's uploads playlist, or None if it has none."""
        request = self._youtube.channels().list(
            part="contentDetails",
            id=channel_id,
        )
        response = await self._execute(request, "channels")

        items = response.get("items") or []
        if not items:
            return None
        related = items[0].get("contentDetails", {}).get("relatedPlaylists", {})
        return related.get("uploads") or None

    async def list_playlist_items(self, playlist_id: str, max_results: int = settings.VIDEOS_PER_CHANNEL) -> dict:
        request = self._youtube.playlistItems().list(
            part="snippet",
            playlistId=playlist_id,
            maxResults=max_results,
        )
        return await self._execute(request, "playlistItems")
