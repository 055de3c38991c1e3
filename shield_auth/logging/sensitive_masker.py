"""
SHIELD Auth - Logging - Sensitive Masker

Masquage des secrets d'authentification avant écriture.
"""

from typing import Any, Dict, Iterable, List, Optional

from .interfaces import ISensitiveMasker


class SensitiveMasker(ISensitiveMasker):
    """
    Masquage récursif par clé et par forme de valeur.

    Un token glissé dans un champ anodin ("detail", "args"...) est
    reconnu à sa forme et masqué lui aussi.

    Example:
        masker = SensitiveMasker()
        masker.mask({"refresh_token": "eyJ...", "user_id": "u-1"})
        # {"refresh_token": "***MASKED***", "user_id": "u-1"}
    """

    def __init__(self, extra_keys: Optional[Iterable[str]] = None) -> None:
        """
        Args:
            extra_keys: Fragments de clé supplémentaires (ex: "ip_address")
        """
        self._keys: List[str] = [k.lower() for k in self.SENSITIVE_KEYS]
        for key in extra_keys or ():
            self.add_key(key)

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    def add_key(self, fragment: str) -> None:
        """
        Raises:
            ValueError: Fragment vide
        """
        normalized = (fragment or "").strip().lower()
        if not normalized:
            raise ValueError("Sensitive key fragment cannot be empty")
        if normalized not in self._keys:
            self._keys.append(normalized)

    def is_sensitive_key(self, key: str) -> bool:
        lowered = str(key).lower()
        return bool(lowered) and any(fragment in lowered for fragment in self._keys)

    def is_sensitive_value(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return any(pattern.match(value) for pattern in self.SENSITIVE_VALUES)

    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            return data
        return {
            key: self.MASK_VALUE if self.is_sensitive_key(key) else self._mask_value(value)
            for key, value in data.items()
        }

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.mask(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        if self.is_sensitive_value(value):
            return self.MASK_VALUE
        return value
