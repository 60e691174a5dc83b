"""
Tests for the rate-limited logging helper.
"""
import threading
from unittest.mock import MagicMock, patch

from cachetools import TTLCache

from tx3_sdk._rate_limited_log import rate_limited_log, reset_rate_limited_log


class TestRateLimitedLog:
    """Suppression of repeated messages."""

    def test_repeated_message_is_suppressed(self):
        mock_logger = MagicMock()

        assert rate_limited_log("Test message", logger_instance=mock_logger) is True
        assert rate_limited_log("Test message", logger_instance=mock_logger) is False

        mock_logger.warning.assert_called_once_with("Test message")

    def test_levels_are_tracked_separately(self):
        mock_logger = MagicMock()

        rate_limited_log("Test message", level="warning", logger_instance=mock_logger)
        rate_limited_log("Test message", level="error", logger_instance=mock_logger)

        mock_logger.warning.assert_called_once_with("Test message")
        mock_logger.error.assert_called_once_with("Test message")

    def test_different_messages_are_logged(self):
        mock_logger = MagicMock()

        rate_limited_log("first", logger_instance=mock_logger)
        rate_limited_log("second", logger_instance=mock_logger)

        assert mock_logger.warning.call_count == 2

    def test_reset_forgets_messages(self):
        mock_logger = MagicMock()

        rate_limited_log("Test message", logger_instance=mock_logger)
        reset_rate_limited_log()
        rate_limited_log("Test message", logger_instance=mock_logger)

        assert mock_logger.warning.call_count == 2

    def test_expired_entries_are_logged_again(self):
        """Entries are forgotten once the TTL elapses"""
        now = [0.0]
        cache = TTLCache(maxsize=10, ttl=60, timer=lambda: now[0])
        mock_logger = MagicMock()

        with patch("tx3_sdk._rate_limited_log._log_cache", cache):
            rate_limited_log("Test message", logger_instance=mock_logger)
            now[0] = 30.0
            rate_limited_log("Test message", logger_instance=mock_logger)
            now[0] = 61.0
            rate_limited_log("Test message", logger_instance=mock_logger)

        assert mock_logger.warning.call_count == 2

    def test_lock_is_held_while_logging(self):
        mock_lock = MagicMock()
        mock_logger = MagicMock()

        with patch("tx3_sdk._rate_limited_log._log_cache_lock", mock_lock):
            rate_limited_log("Test message", logger_instance=mock_logger)

        mock_lock.__enter__.assert_called_once()
        mock_lock.__exit__.assert_called_once()

    def test_concurrent_callers_log_once(self):
        mock_logger = MagicMock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            rate_limited_log("Concurrent message", logger_instance=mock_logger)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        mock_logger.warning.assert_called_once_with("Concurrent message")
