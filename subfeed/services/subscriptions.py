import logging
from datetime import datetime
from typing import Callable, List, Optional
from pydantic import ValidationError
from ..config import settings
from ..models import ChannelSubscription, SubscriptionSnapshot
from .credentials import utc_now
from .utils import parse_published_at, pick_thumbnail

logger = logging.getLogger(__name__)

CACHE_KEY = "youtube_subscriptions_cache"


class SubscriptionCache:
    def __init__(self, state):
        self._state = state

    def read(self) -> Optional[SubscriptionSnapshot]:
        raw = self._state.read(CACHE_KEY)
        if raw is None:
            return None
        try:
            return SubscriptionSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable subscriptions cache: {e}")
            return None

    def write(self, snapshot: SubscriptionSnapshot) -> None:
        self._state.write(CACHE_KEY, snapshot.model_dump(mode="json"))

    def clear(self) -> None:
        self._state.clear(CACHE_KEY)


def parse_subscription(item: dict) -> Optional[ChannelSubscription]:
    snippet = item.get("snippet") or {}
    channel_id = (snippet.get("resourceId") or {}).get("channelId")
    if not channel_id:
        return None
    return ChannelSubscription(
        channel_id=channel_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails"), preferred=("default",)),
        subscribed_at=parse_published_at(snippet.get("publishedAt", "")),
    )


class SubscriptionResolver:
    def __init__(
        self,
        client,
        cache: SubscriptionCache,
        clock: Callable[[], datetime] = utc_now,
        page_size: int = settings.SUBSCRIPTIONS_PAGE_SIZE,
    ):
        self._client = client
        self._cache = cache
        self._clock = clock
        self.page_size = page_size

    async def resolve(self, force_refresh: bool = False) -> List[ChannelSubscription]:
        """Returns the user's subscriptions, from cache unless force_refresh.

        Upstream errors propagate unchanged; nothing is retried.
        """
        if not force_refresh:
            cached = self._cache.read()
            if cached is not None:
                logger.info(f"Using cached subscriptions ({len(cached.subscriptions)} channels)")
                return cached.subscriptions

        response = await self._client.list_my_subscriptions(self.page_size)

        subscriptions = []
        for item in response.get("items") or []:
            subscription = parse_subscription(item)
            if subscription is None:
                logger.warning(f"Skipping subscription without channel id: {item.get('id')}")
                continue
            subscriptions.append(subscription)

        self._cache.write(SubscriptionSnapshot(subscriptions=subscriptions, fetched_at=self._clock()))
        logger.info(f"Fetched {len(subscriptions)} subscriptions")
        return subscriptions
