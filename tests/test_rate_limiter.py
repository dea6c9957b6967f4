"""Tests for the coarse windowed rate limiter."""

from ipdis.core.rate_limiter import RateLimiter, SystemClock

ADDR_A = ("192.168.1.10", 1902)
ADDR_B = ("192.168.1.11", 1902)


class TestRateLimiter:
    def test_first_reset_is_due_immediately(self, clock, logger):
        limiter = RateLimiter(clock, logger=logger)
        assert limiter.next_reset == clock.now()
        assert limiter.reset_if_due() is True
        assert limiter.next_reset == 10.0
        assert limiter.reset_if_due() is False

    def test_second_request_in_window_is_rejected(self, clock, logger):
        limiter = RateLimiter(clock, logger=logger)
        assert limiter.check(ADDR_A) is True
        assert limiter.check(ADDR_A) is False

    def test_addresses_are_independent(self, clock, logger):
        limiter = RateLimiter(clock, logger=logger)
        assert limiter.check(ADDR_A) is True
        assert limiter.check(ADDR_B) is True
        assert limiter.check(("192.168.1.10", 5000)) is True

    def test_admitted_again_after_window(self, clock, logger):
        limiter = RateLimiter(clock, logger=logger)
        assert limiter.check(ADDR_A) is True
        clock.advance(9.99)
        assert limiter.check(ADDR_A) is False
        clock.advance(0.01)
        assert limiter.check(ADDR_A) is True

    def test_whole_set_is_cleared_at_once(self, clock, logger):
        limiter = RateLimiter(clock, logger=logger)
        limiter.check(ADDR_A)
        clock.advance(9)
        limiter.check(ADDR_B)
        clock.advance(1)
        assert limiter.check(ADDR_B) is True
        assert limiter.check(ADDR_A) is True

    def test_custom_window(self, clock, logger):
        limiter = RateLimiter(clock, window=2.0, logger=logger)
        limiter.check(ADDR_A)
        clock.advance(2)
        assert limiter.check(ADDR_A) is True

    def test_rejection_is_logged(self, clock, logger, log_stream):
        limiter = RateLimiter(clock, logger=logger)
        limiter.check(ADDR_A)
        limiter.check(ADDR_A)
        assert "already served" in log_stream.getvalue()

    def test_system_clock_is_default(self):
        limiter = RateLimiter()
        assert isinstance(limiter.clock, SystemClock)
        assert limiter.check(ADDR_A) is True
