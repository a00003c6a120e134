import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Set
from ..config import settings
from ..models import AggregationResult, VideoItem
from .credentials import CredentialError, CredentialStore, utc_now
from .subscriptions import SubscriptionResolver
from .utils import parse_published_at, pick_thumbnail
from .youtube import PartialChannelFailure, YouTubeClient

logger = logging.getLogger(__name__)


def parse_playlist_item(item: dict) -> Optional[VideoItem]:
    snippet = item.get("snippet") or {}
    video_id = (snippet.get("resourceId") or {}).get("videoId")
    published_at = parse_published_at(snippet.get("publishedAt", ""))
    if not video_id or published_at is None:
        return None
    return VideoItem(
        id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails")),
        published_at=published_at,
        channel_title=snippet.get("channelTitle", ""),
        channel_id=snippet.get("videoOwnerChannelId") or snippet.get("channelId", ""),
    )


class UploadFetcher:
    def __init__(self, client: YouTubeClient, credentials: Optional[CredentialStore] = None):
        self._client = client
        self._credentials = credentials

    async def fetch_recent(
        self,
        channel_id: str,
        max_items: int,
        window_start: datetime,
        seen: Set[str],
        on_failure: Callable[[PartialChannelFailure], None] = None,
    ) -> List[VideoItem]:
        """Most recent uploads of one channel published at or after window_start.

        Ids already in `seen` are skipped and every emitted id is added to it.
        Any failure for this channel is logged and reported through
        on_failure; the channel then contributes nothing.
        """
        try:
            playlist_id = await self._client.get_channel_uploads_playlist_id(channel_id)
            if playlist_id is None:
                logger.info(f"No uploads playlist for channel {channel_id}")
                return []
            if self._credentials is not None:
                # Token may have crossed the expiry margin since the last call
                self._credentials.require()
            response = await self._client.list_playlist_items(playlist_id, max_items)
        except Exception as e:
            failure = PartialChannelFailure(channel_id, e)
            logger.error(str(failure))
            if on_failure is not None:
                on_failure(failure)
            return []

        videos = []
        for item in response.get("items") or []:
            video = parse_playlist_item(item)
            if video is None:
                logger.warning(f"Skipping malformed playlist item {item.get('id')} in {playlist_id}")
                continue
            if video.id in seen or video.published_at < window_start:
                continue
            seen.add(video.id)
            videos.append(video)

        logger.debug(f"Channel {channel_id}: {len(videos)} recent videos")
        return videos


class AggregationPipeline:
    """Builds the recent-uploads feed across every subscribed channel.

    Channels are fetched one after another, never concurrently; a single
    `seen` set is threaded through the whole run.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        resolver: SubscriptionResolver,
        fetcher: UploadFetcher,
        clock: Callable[[], datetime] = utc_now,
        videos_per_channel: int = settings.VIDEOS_PER_CHANNEL,
    ):
        self._credentials = credentials
        self._resolver = resolver
        self._fetcher = fetcher
        self._clock = clock
        self.videos_per_channel = videos_per_channel

    async def run(self, window_days: float = settings.DAYS_LOOKBACK, force_refresh: bool = False) -> AggregationResult:
        if window_days < 0:
            raise ValueError(f"window_days must not be negative, got {window_days}")

        try:
            self._credentials.require()
        except CredentialError as e:
            logger.warning(f"Skipping feed run: {e}")
            return AggregationResult()

        # QuotaExceeded / CredentialInvalid / UpstreamError propagate from here
        subscriptions = await self._resolver.resolve(force_refresh=force_refresh)
        if not subscriptions:
            logger.info("No subscriptions found")
            return AggregationResult()

        window_start = self._clock() - timedelta(days=window_days)
        logger.info(f"Fetching videos for {len(subscriptions)} channels published after {window_start.isoformat()}")

        videos: List[VideoItem] = []
        seen: Set[str] = set()
        failed_channels: List[str] = []

        for subscription in subscriptions:
            if not self._credentials.is_usable():
                logger.warning("Credential lost mid-run, abandoning feed run")
                return AggregationResult()
            videos.extend(
                await self._fetcher.fetch_recent(
                    subscription.channel_id,
                    self.videos_per_channel,
                    window_start,
                    seen,
                    on_failure=lambda failure: failed_channels.append(failure.channel_id),
                )
            )

        if not self._credentials.is_usable():
            logger.warning("Credential lost mid-run, abandoning feed run")
            return AggregationResult()

        # Sort by date (newest first); equal timestamps keep channel order
        videos.sort(key=lambda v: v.published_at, reverse=True)

        logger.info(f"Feed run complete: {len(videos)} videos, {len(failed_channels)} failed channels")
        return AggregationResult(items=videos, total_count=len(videos), failed_channels=failed_channels)
