import pytest
import httplib2
from googleapiclient.errors import HttpError
from subfeed.services.credentials import CredentialStore
from subfeed.services.storage import MemoryState
from subfeed.services.youtube import (
    CredentialInvalid,
    QuotaExceeded,
    UpstreamError,
    YouTubeClient,
    classify_http_error,
)
from fakes import make_http_error, make_subscription


@pytest.mark.asyncio
async def test_bearer_header_attached(client, youtube):
    youtube.subscriptions_response = {"items": [make_subscription("UC1")]}
    response = await client.list_my_subscriptions(25)

    assert response == {"items": [make_subscription("UC1")]}
    request = youtube.calls("subscriptions")[0]
    assert request.headers["authorization"] == "Bearer test-token"
    assert request.params["mine"] is True
    assert request.params["maxResults"] == 25


@pytest.mark.asyncio
async def test_no_header_without_token(youtube, clock):
    client = YouTubeClient(CredentialStore(MemoryState(), clock=clock), youtube=youtube)
    await client.list_playlist_items("UU1", 2)
    assert "authorization" not in youtube.calls("playlistItems")[0].headers


@pytest.mark.asyncio
async def test_quota_error_keeps_credential(client, credentials, youtube):
    youtube.subscriptions_response = make_http_error(403, "The request cannot be completed because you have exceeded your quota.", reason="quotaExceeded")

    with pytest.raises(QuotaExceeded) as exc_info:
        await client.list_my_subscriptions()

    assert exc_info.value.status == 403
    assert credentials.is_usable() is True
    assert credentials.current().token == "test-token"


@pytest.mark.asyncio
async def test_invalid_credential_is_cleared(client, credentials, youtube):
    youtube.subscriptions_response = make_http_error(403, "Request had invalid authentication credentials.", reason="forbidden")

    with pytest.raises(CredentialInvalid):
        await client.list_my_subscriptions()

    assert credentials.current() is None
    assert credentials.is_usable() is False


@pytest.mark.asyncio
async def test_other_status_is_upstream_error(client, credentials, youtube):
    youtube.uploads_by_channel["UC1"] = make_http_error(500, "Backend Error", transport_reason="Internal Server Error")

    with pytest.raises(UpstreamError) as exc_info:
        await client.get_channel_uploads_playlist_id("UC1")

    assert exc_info.value.status == 500
    assert str(exc_info.value) == "Backend Error"
    assert credentials.is_usable() is True


@pytest.mark.asyncio
async def test_transport_error_is_upstream_error(client, youtube):
    youtube.items_by_playlist["UU1"] = ConnectionResetError("connection reset by peer")

    with pytest.raises(UpstreamError):
        await client.list_playlist_items("UU1", 2)


@pytest.mark.asyncio
async def test_channel_without_uploads(client, youtube):
    assert await client.get_channel_uploads_playlist_id("UCnothing") is None

    youtube.uploads_by_channel["UC1"] = "UU1"
    assert await client.get_channel_uploads_playlist_id("UC1") == "UU1"


def test_classify_quota_by_status_field():
    error = classify_http_error(make_http_error(403, "Too many", error_status="RESOURCE_EXHAUSTED"))
    assert isinstance(error, QuotaExceeded)


def test_classify_quota_by_message_fallback():
    error = classify_http_error(make_http_error(403, "Daily Quota Exceeded."))
    assert isinstance(error, QuotaExceeded)


def test_classify_401_is_generic():
    error = classify_http_error(make_http_error(401, "Invalid Credentials", reason="authError"))
    assert type(error) is UpstreamError
    assert error.status == 401


def test_classify_uses_transport_reason_without_body():
    resp = httplib2.Response({"status": 502})
    resp.reason = "Bad Gateway"
    error = classify_http_error(HttpError(resp, b""))
    assert type(error) is UpstreamError
    assert error.status == 502
    assert str(error) == "Bad Gateway"


def test_classify_uses_transport_reason_without_message():
    error = classify_http_error(make_http_error(404, transport_reason="Not Found"))
    assert type(error) is UpstreamError
    assert str(error) == "Not Found"
