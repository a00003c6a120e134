import math
from datetime import datetime, timedelta
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class Credential(BaseModel):
    """Bearer token from the OAuth redirect plus its absolute expiry."""
    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: Optional[datetime] = None

    def is_usable(self, now: datetime, margin: timedelta) -> bool:
        if not self.token:
            return False
        # No expiry recorded: treated as valid (fail open)
        if self.expires_at is None:
            return True
        return now < self.expires_at - margin


class ChannelSubscription(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_id: str
    title: str = ""
    description: str = ""
    thumbnail_url: str = ""
    subscribed_at: Optional[datetime] = None


class SubscriptionSnapshot(BaseModel):
    subscriptions: List[ChannelSubscription]
    fetched_at: datetime


class VideoItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    thumbnail_url: str = ""
    published_at: datetime
    channel_title: str = ""
    channel_id: str = ""


class AggregationResult(BaseModel):
    items: List[VideoItem] = []
    total_count: int = 0
    failed_channels: List[str] = []


class Page(BaseModel):
    items: List[VideoItem]
    total_count: int
    page_index: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def first_index(self) -> int:
        """1-based position of the first item shown, 0 when the page is empty."""
        if not self.items:
            return 0
        return (self.page_index - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        if not self.items:
            return 0
        return self.first_index + len(self.items) - 1
