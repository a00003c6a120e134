import pytest
from datetime import datetime, timezone
from subfeed.main import create_feed
from subfeed.services.credentials import CredentialStore
from subfeed.services.storage import MemoryState
from subfeed.services.youtube import YouTubeClient
from fakes import FakeYouTube

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

@pytest.fixture
def now():
    return NOW

@pytest.fixture
def clock():
    return lambda: NOW

@pytest.fixture
def state():
    return MemoryState()

@pytest.fixture
def credentials(state, clock):
    # Logged in with a fresh one hour token
    store = CredentialStore(state, clock=clock)
    store.store("test-token", 3600)
    return store

@pytest.fixture
def youtube():
    return FakeYouTube()

@pytest.fixture
def client(credentials, youtube):
    return YouTubeClient(credentials, youtube=youtube)

@pytest.fixture
def feed(state, youtube, clock, credentials):
    return create_feed(state=state, youtube=youtube, clock=clock)
