"""
SHIELD Auth - Interfaces Incident

Contrats de détection de force brute et verrouillage temporaire
des comptes après échecs de connexion répétés.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class LockoutRecord:
    """
    Compteur d'échecs pour un email normalisé (éphémère, non persisté).

    Attributes:
        failure_count: Échecs dans la fenêtre courante
        window_start: Premier échec de la fenêtre
        last_failure: Dernier échec
        locked_until: Fin du verrouillage (None si non verrouillé)
    """

    failure_count: int
    window_start: datetime
    last_failure: datetime
    locked_until: Optional[datetime] = None


@dataclass(frozen=True)
class LockoutStatus:
    """
    Statut de verrouillage d'un compte.

    Attributes:
        email: Email normalisé
        locked: True si verrouillé
        locked_until: Fin du verrouillage
        failure_count: Échecs dans la fenêtre courante
        remaining_seconds: Secondes avant déverrouillage (0 si non verrouillé)
    """

    email: str
    locked: bool
    locked_until: Optional[datetime]
    failure_count: int
    remaining_seconds: int = 0


class IAccountLockoutTracker(ABC):
    """
    Interface suivi des échecs de connexion.

    Responsabilités:
        - Compter les échecs par email normalisé dans une fenêtre fixe
        - Verrouiller après le seuil pour une durée fixe
        - Accès concurrent sûr (aucun échec perdu)
    """

    @abstractmethod
    def record_failed_login(self, email: str) -> LockoutStatus:
        """
        Enregistre un échec et verrouille si le seuil est atteint.

        Returns:
            Statut après enregistrement
        """
        pass

    @abstractmethod
    def record_successful_login(self, email: str) -> None:
        """Efface compteur et verrou."""
        pass

    @abstractmethod
    def is_account_locked(self, email: str) -> bool:
        """True si verrouillé (auto-déverrouille si expiré)."""
        pass

    @abstractmethod
    def get_lock_remaining_time(self, email: str) -> int:
        """Secondes restantes (arrondi supérieur), 0 si non verrouillé."""
        pass

    @abstractmethod
    def purge_stale(self) -> int:
        """Supprime compteurs inactifs et verrous expirés. Retourne le nombre supprimé."""
        pass
