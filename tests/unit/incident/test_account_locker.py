"""
Tests unitaires pour AccountLockoutTracker.

Vérifie:
    5 échecs dans la fenêtre = compte verrouillé 15 minutes,
    déverrouillage automatique à l'expiration.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from shield_auth.incident import AccountLockoutTracker, LockoutStatus


EMAIL = "user@test.com"


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def fake_clock(make_clock):
    return make_clock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def locker(fake_clock) -> AccountLockoutTracker:
    return AccountLockoutTracker(clock=fake_clock)


def fail(locker: AccountLockoutTracker, times: int, email: str = EMAIL) -> LockoutStatus:
    status = None
    for _ in range(times):
        status = locker.record_failed_login(email)
    return status


# =============================================================================
# VERROUILLAGE
# =============================================================================


class TestLockout:
    """Seuil et durée du verrou."""

    def test_below_threshold_not_locked(self, locker):
        status = fail(locker, 4)

        assert status.locked is False
        assert status.failure_count == 4
        assert locker.is_account_locked(EMAIL) is False
        assert locker.get_lock_remaining_time(EMAIL) == 0

    def test_threshold_locks(self, locker):
        status = fail(locker, 5)

        assert status.locked is True
        assert status.remaining_seconds == 900
        assert locker.is_account_locked(EMAIL) is True

    def test_remaining_time_decreases(self, locker, fake_clock):
        fail(locker, 5)

        fake_clock.advance(minutes=5, seconds=30)

        assert locker.get_lock_remaining_time(EMAIL) == 570

    def test_remaining_time_rounded_up(self, locker, fake_clock):
        fail(locker, 5)

        fake_clock.advance(seconds=899, milliseconds=500)

        assert locker.get_lock_remaining_time(EMAIL) == 1

    def test_auto_unlock_after_duration(self, locker, fake_clock):
        fail(locker, 5)

        fake_clock.advance(minutes=15)

        assert locker.is_account_locked(EMAIL) is False
        assert locker.get_status(EMAIL).failure_count == 0

    def test_failures_while_locked_do_not_extend(self, locker, fake_clock):
        fail(locker, 5)
        fake_clock.advance(minutes=10)

        status = locker.record_failed_login(EMAIL)

        assert status.locked is True
        assert status.remaining_seconds == 300

    def test_new_cycle_after_unlock(self, locker, fake_clock):
        fail(locker, 5)
        fake_clock.advance(minutes=15)

        status = locker.record_failed_login(EMAIL)

        assert status.locked is False
        assert status.failure_count == 1

    def test_email_normalized(self, locker):
        fail(locker, 5, email="  User@Test.COM ")

        assert locker.is_account_locked(EMAIL) is True

    def test_accounts_isolated(self, locker):
        fail(locker, 5)

        assert locker.is_account_locked("other@test.com") is False

    def test_custom_threshold(self, fake_clock):
        locker = AccountLockoutTracker(max_failures=3, lockout_duration=timedelta(minutes=1),
                                       clock=fake_clock)

        status = fail(locker, 3)

        assert status.locked is True
        assert status.remaining_seconds == 60

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            AccountLockoutTracker(max_failures=0)


# =============================================================================
# FENÊTRE
# =============================================================================


class TestFailureWindow:
    """Fenêtre fixe démarrant au premier échec."""

    def test_failures_outside_window_restart_count(self, locker, fake_clock):
        fail(locker, 4)
        fake_clock.advance(minutes=16)

        status = locker.record_failed_login(EMAIL)

        assert status.locked is False
        assert status.failure_count == 1

    def test_window_is_fixed_not_sliding(self, locker, fake_clock):
        fail(locker, 2)
        fake_clock.advance(minutes=14)
        fail(locker, 2)
        fake_clock.advance(minutes=2)

        # Premier échec il y a 16 minutes: nouvelle fenêtre
        status = locker.record_failed_login(EMAIL)

        assert status.failure_count == 1


# =============================================================================
# SUCCÈS ET ADMINISTRATION
# =============================================================================


class TestResetAndAdmin:

    def test_success_clears_counter(self, locker):
        fail(locker, 4)

        locker.record_successful_login(EMAIL)

        assert fail(locker, 1).failure_count == 1

    def test_manual_unlock(self, locker):
        fail(locker, 5)

        assert locker.unlock(EMAIL) is True
        assert locker.is_account_locked(EMAIL) is False
        assert locker.unlock(EMAIL) is False

    def test_purge_stale(self, locker, fake_clock):
        fail(locker, 5, email="locked@test.com")
        fail(locker, 1, email="idle@test.com")
        fake_clock.advance(minutes=20)
        fail(locker, 1, email="fresh@test.com")

        assert locker.purge_stale() == 2
        assert locker.get_status("fresh@test.com").failure_count == 1

    def test_clear_all(self, locker):
        fail(locker, 5)

        locker.clear_all()

        assert locker.is_account_locked(EMAIL) is False


# =============================================================================
# CONCURRENCE
# =============================================================================


class TestConcurrency:

    def test_concurrent_failures_never_undercounted(self):
        locker = AccountLockoutTracker(max_failures=1000)
        threads = [
            threading.Thread(target=fail, args=(locker, 50))
            for _ in range(8)
        ]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert locker.get_status(EMAIL).failure_count == 400
