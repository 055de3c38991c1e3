"""
SHIELD Auth - Incident

Protection force brute: verrouillage temporaire des comptes.
"""

from .interfaces import IAccountLockoutTracker, LockoutRecord, LockoutStatus
from .account_locker import AccountLockoutTracker

__all__ = [
    # Interfaces
    "IAccountLockoutTracker",
    # Data classes
    "LockoutRecord",
    "LockoutStatus",
    # Implementations
    "AccountLockoutTracker",
]
