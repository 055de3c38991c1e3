"""
SHIELD Auth - Password Hasher
Hachage bcrypt des mots de passe.
"""

import secrets
from typing import Optional

import bcrypt

from .interfaces import IPasswordHasher


# Limite bcrypt: seuls les 72 premiers octets sont pris en compte
BCRYPT_MAX_BYTES = 72


class PasswordHasher(IPasswordHasher):
    """
    Hachage bcrypt à coût configurable.

    Example:
        hasher = PasswordHasher(rounds=12)
        hashed = hasher.hash("Passw0rd!1")
        assert hasher.compare("Passw0rd!1", hashed)
    """

    DEFAULT_ROUNDS: int = 12

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """
        Args:
            rounds: Facteur de coût bcrypt (4-31, défaut: 12)
        """
        if rounds < 4 or rounds > 31:
            raise ValueError(f"bcrypt rounds must be 4-31, got {rounds}")
        self.rounds = rounds
        self._dummy_hash: Optional[bytes] = None

    def hash(self, password: str) -> str:
        """Hache avec un sel aléatoire. Retourne le hash modulaire $2b$..."""
        hashed = bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def compare(self, password: str, hashed: str) -> bool:
        """
        Vérifie un mot de passe (bcrypt.checkpw, temps constant).

        Un hash stocké illisible donne False.
        """
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(password), hashed.encode("utf-8"))
        except ValueError:
            return False

    def dummy_compare(self, password: str) -> bool:
        """
        Compare contre un hash jetable.

        Utilisé quand l'email est inconnu: même coût qu'un mauvais mot de passe.

        Returns:
            Toujours False
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                secrets.token_hex(16).encode("ascii"), bcrypt.gensalt(rounds=self.rounds)
            )
        bcrypt.checkpw(self._encode(password), self._dummy_hash)
        return False

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]
