"""
SHIELD Auth - Account Lockout Tracker

Verrouillage temporaire des comptes après plusieurs échecs
de connexion (protection force brute).

État en mémoire, propre au processus: un redémarrage efface les
verrous. Ce n'est pas un contrôle de sécurité durable.
"""

import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from ..storage.interfaces import normalize_email
from .interfaces import IAccountLockoutTracker, LockoutRecord, LockoutStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountLockoutTracker(IAccountLockoutTracker):
    """
    Compteur d'échecs par email avec fenêtre fixe et verrou temporaire.

    La fenêtre démarre au premier échec; un échec hors fenêtre
    redémarre le compte à 1. Le verrou dure LOCKOUT_DURATION.

    Toutes les lectures/écritures passent par un threading.Lock:
    deux échecs concurrents ne sont jamais sous-comptés, et un échec
    concurrent d'un succès est appliqué dans l'ordre d'acquisition.

    Example:
        tracker = AccountLockoutTracker()
        tracker.record_failed_login("user@test.com")
        if tracker.is_account_locked("user@test.com"):
            wait = tracker.get_lock_remaining_time("user@test.com")
    """

    MAX_FAILURES: int = 5
    FAILURE_WINDOW: timedelta = timedelta(minutes=15)
    LOCKOUT_DURATION: timedelta = timedelta(minutes=15)

    def __init__(
        self,
        max_failures: Optional[int] = None,
        failure_window: Optional[timedelta] = None,
        lockout_duration: Optional[timedelta] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            max_failures: Nombre d'échecs avant verrouillage (défaut: 5)
            failure_window: Fenêtre de comptage (défaut: 15 min)
            lockout_duration: Durée du verrouillage (défaut: 15 min)
            clock: Horloge UTC injectable (tests)
        """
        self._max_failures = max_failures if max_failures is not None else self.MAX_FAILURES
        self._failure_window = failure_window if failure_window is not None else self.FAILURE_WINDOW
        self._lockout_duration = lockout_duration if lockout_duration is not None else self.LOCKOUT_DURATION
        self._clock = clock or _utcnow

        if self._max_failures < 1:
            raise ValueError("max_failures must be >= 1")

        self._lock = threading.Lock()
        self._records: Dict[str, LockoutRecord] = {}

    @property
    def max_failures(self) -> int:
        return self._max_failures

    def record_failed_login(self, email: str) -> LockoutStatus:
        """
        Enregistre un échec d'authentification.

        Un compte déjà verrouillé n'est pas prolongé.
        """
        key = normalize_email(email)

        with self._lock:
            now = self._clock()
            record = self._current_record(key, now)

            if record is not None and record.locked_until is not None:
                return self._status(key, record, now)

            if record is None or now - record.window_start > self._failure_window:
                # Nouvelle fenêtre
                record = LockoutRecord(failure_count=1, window_start=now, last_failure=now)
                self._records[key] = record
            else:
                record.failure_count += 1
                record.last_failure = now

            if record.failure_count >= self._max_failures:
                record.locked_until = now + self._lockout_duration

            return self._status(key, record, now)

    def record_successful_login(self, email: str) -> None:
        with self._lock:
            self._records.pop(normalize_email(email), None)

    def is_account_locked(self, email: str) -> bool:
        key = normalize_email(email)
        with self._lock:
            record = self._current_record(key, self._clock())
            return record is not None and record.locked_until is not None

    def get_lock_remaining_time(self, email: str) -> int:
        key = normalize_email(email)
        with self._lock:
            now = self._clock()
            record = self._current_record(key, now)
            return self._remaining_seconds(record, now)

    def get_status(self, email: str) -> LockoutStatus:
        """Statut détaillé (pour administration et tests)."""
        key = normalize_email(email)
        with self._lock:
            now = self._clock()
            record = self._current_record(key, now)
            if record is None:
                return LockoutStatus(email=key, locked=False, locked_until=None, failure_count=0)
            return self._status(key, record, now)

    def unlock(self, email: str) -> bool:
        """
        Déverrouille manuellement un compte (action admin).

        Returns:
            True si le compte était verrouillé
        """
        key = normalize_email(email)
        with self._lock:
            record = self._current_record(key, self._clock())
            if record is None or record.locked_until is None:
                return False
            del self._records[key]
            return True

    def purge_stale(self) -> int:
        """
        Supprime les compteurs inactifs depuis plus d'une fenêtre
        et les verrous expirés.

        Returns:
            Nombre d'entrées supprimées
        """
        with self._lock:
            now = self._clock()
            stale: List[str] = [
                key for key, record in self._records.items()
                if self._is_stale(record, now)
            ]
            for key in stale:
                del self._records[key]
            return len(stale)

    def clear_all(self) -> None:
        """Efface tous les compteurs et verrous."""
        with self._lock:
            self._records.clear()

    def _current_record(self, key: str, now: datetime) -> Optional[LockoutRecord]:
        """Appelé sous verrou. Supprime l'entrée si son verrou a expiré."""
        record = self._records.get(key)
        if record is None:
            return None
        if record.locked_until is not None and now >= record.locked_until:
            # Auto-déverrouillage: le cycle suivant repart de zéro
            del self._records[key]
            return None
        return record

    def _is_stale(self, record: LockoutRecord, now: datetime) -> bool:
        if record.locked_until is not None:
            return now >= record.locked_until
        return now - record.last_failure > self._failure_window

    def _status(self, key: str, record: LockoutRecord, now: datetime) -> LockoutStatus:
        return LockoutStatus(
            email=key,
            locked=record.locked_until is not None,
            locked_until=record.locked_until,
            failure_count=record.failure_count,
            remaining_seconds=self._remaining_seconds(record, now),
        )

    @staticmethod
    def _remaining_seconds(record: Optional[LockoutRecord], now: datetime) -> int:
        if record is None or record.locked_until is None:
            return 0
        remaining = (record.locked_until - now).total_seconds()
        return max(0, math.ceil(remaining))
