import logging
from unittest.mock import patch
from subfeed.config import _resolve_log_level, configure_logging, settings


def test_defaults():
    assert settings.SUBSCRIPTIONS_PAGE_SIZE == 25
    assert settings.VIDEOS_PER_CHANNEL == 2
    assert settings.VIDEOS_PER_PAGE == 50
    assert settings.DEFAULT_TOKEN_TTL == 3600
    assert settings.TOKEN_EXPIRY_MARGIN.total_seconds() == 300


def test_resolve_log_level():
    assert _resolve_log_level("debug") == logging.DEBUG
    assert _resolve_log_level(" WARNING ") == logging.WARNING
    assert _resolve_log_level("chatty") == logging.INFO


def test_configure_logging_uses_setting():
    with patch("subfeed.config.logging.basicConfig") as basic_config:
        with patch.object(settings, "LOG_LEVEL", "error"):
            configure_logging()
    assert basic_config.call_args.kwargs["level"] == logging.ERROR
