from typing import List
from subfeed.config import settings
from subfeed.models import ChannelSubscription, Page
from subfeed.services.credentials import CredentialStore, utc_now
from subfeed.services.feed import AggregationPipeline, UploadFetcher
from subfeed.services.pagination import Paginator
from subfeed.services.storage import JsonFileState
from subfeed.services.subscriptions import SubscriptionCache, SubscriptionResolver
from subfeed.services.youtube import YouTubeClient


class Feed:
    """What the UI layer talks to.

    Errors are reported, never acted on: when `is_authenticated()` turns
    false the caller decides whether to send the user back to sign in.

    Logging is left to the host; call `subfeed.config.configure_logging()`
    once at startup for a console handler at LOG_LEVEL.
    """

    def __init__(self, credentials, cache, client, resolver, pipeline, paginator):
        self.credentials = credentials
        self.cache = cache
        self.client = client
        self.resolver = resolver
        self.pipeline = pipeline
        self.paginator = paginator

    def is_authenticated(self) -> bool:
        return self.credentials.is_usable()

    async def get_recent_videos(
        self,
        page: int = 1,
        per_page: int = settings.VIDEOS_PER_PAGE,
        window_days: float = settings.DAYS_LOOKBACK,
        force_refresh: bool = False,
    ) -> Page:
        result = await self.pipeline.run(window_days, force_refresh=force_refresh)
        return self.paginator.page(result, page, per_page)

    async def get_subscriptions(self, force_refresh: bool = False) -> List[ChannelSubscription]:
        # Raises NoCredential / CredentialExpired for the UI to redirect on
        self.credentials.require()
        return await self.resolver.resolve(force_refresh=force_refresh)

    def logout(self) -> None:
        self.credentials.invalidate()
        self.cache.clear()


def create_feed(state=None, youtube=None, clock=None) -> Feed:
    if state is None:
        state = JsonFileState(settings.STATE_FILE)
    state.init()
    clock = clock or utc_now

    credentials = CredentialStore(state, clock=clock)
    cache = SubscriptionCache(state)
    client = YouTubeClient(credentials, youtube=youtube)
    resolver = SubscriptionResolver(client, cache, clock=clock)
    pipeline = AggregationPipeline(credentials, resolver, UploadFetcher(client, credentials), clock=clock)
    return Feed(credentials, cache, client, resolver, pipeline, Paginator())
