"""
Идентификация алгоритмов подписи для разбора legacy-параметров.

Определяет:
- AlgorithmFamily — закрытое перечисление семейств с собственной
  грамматикой legacy-параметров
- SignatureFormat — формат подписи ("plain" vs DER SEQUENCE)
- AlgorithmIdentity — immutable dataclass (имя + формат подписи)
- family_for() — единственное место, где сравниваются имена алгоритмов

Example:
    >>> from src.pubkey.metadata import AlgorithmFamily, family_for
    >>> family_for("Ed25519")
    <AlgorithmFamily.ED25519: 'ed25519'>
    >>> family_for("ECDSA")
    <AlgorithmFamily.DSA_FAMILY: 'dsa_family'>

Version: 1.0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.pubkey.config import DEFAULT_PARSER_CONFIG, LegacyParserConfig


# ==============================================================================
# ENUM: ALGORITHM FAMILY
# ==============================================================================


class AlgorithmFamily(str, Enum):
    """
    Семейство алгоритмов подписи с точки зрения legacy-грамматики.

    Values:
        - RSA: padding-спецификация ("PSS(SHA-256,MGF1,32)")
        - SM2: "UserID" или "UserID,Hash"
        - ED25519 / ED448: pure или prehash вариант
        - DSA_FAMILY: DSA, ECDSA, ECKCDSA, ECGDSA и все прочие
        - POST_QUANTUM: randomized/deterministic lattice/hash-based схемы
    """

    RSA = "rsa"
    SM2 = "sm2"
    ED25519 = "ed25519"
    ED448 = "ed448"
    DSA_FAMILY = "dsa_family"
    POST_QUANTUM = "post_quantum"

    def label(self) -> str:
        """
        Человекочитаемое название семейства.

        Returns:
            Название для логов и сообщений
        """
        labels = {
            AlgorithmFamily.RSA: "RSA",
            AlgorithmFamily.SM2: "SM2",
            AlgorithmFamily.ED25519: "Ed25519",
            AlgorithmFamily.ED448: "Ed448",
            AlgorithmFamily.DSA_FAMILY: "DSA/ECDSA",
            AlgorithmFamily.POST_QUANTUM: "Post-quantum",
        }
        return labels[self]


# ==============================================================================
# ENUM: SIGNATURE FORMAT
# ==============================================================================


class SignatureFormat(str, Enum):
    """
    Формат кодирования подписи.

    Values:
        - STANDARD: конкатенация компонент фиксированной ширины (r || s)
        - DER_SEQUENCE: DER SEQUENCE { r INTEGER, s INTEGER }

    Note:
        Учитывается только семейством DSA/ECDSA.
    """

    STANDARD = "standard"
    DER_SEQUENCE = "der_sequence"

    @classmethod
    def from_str(cls, value: str) -> SignatureFormat:
        """
        Парсинг из строки (case-insensitive).

        Raises:
            ValueError: Некорректное значение

        Example:
            >>> SignatureFormat.from_str("DER_SEQUENCE")
            <SignatureFormat.DER_SEQUENCE: 'der_sequence'>
        """
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown signature format: {value}. "
                f"Allowed: {[f.value for f in cls]}"
            ) from None


# ==============================================================================
# FAMILY MAPPING
# ==============================================================================

_EXACT_FAMILIES = {
    "RSA": AlgorithmFamily.RSA,
    "SM2": AlgorithmFamily.SM2,
    "Ed25519": AlgorithmFamily.ED25519,
    "Ed448": AlgorithmFamily.ED448,
}


def family_for(
    algo_name: str, config: Optional[LegacyParserConfig] = None
) -> AlgorithmFamily:
    """
    Определить семейство алгоритма по каноническому имени.

    Args:
        algo_name: Каноническое имя ("RSA", "Ed25519", "Dilithium3", ...)
        config: Конфигурация с префиксами PQ-алгоритмов

    Returns:
        AlgorithmFamily; неизвестные имена относятся к DSA_FAMILY
    """
    config = config or DEFAULT_PARSER_CONFIG

    if config.is_post_quantum(algo_name):
        return AlgorithmFamily.POST_QUANTUM
    return _EXACT_FAMILIES.get(algo_name, AlgorithmFamily.DSA_FAMILY)


# ==============================================================================
# DATACLASS: ALGORITHM IDENTITY
# ==============================================================================


@dataclass(frozen=True)
class AlgorithmIdentity:
    """
    Идентичность алгоритма, для которого разбираются параметры.

    Attributes:
        name: Каноническое имя алгоритма ключа ("RSA", "ECDSA", "SM2")
        signature_format: Формат подписи (только DSA/ECDSA)

    Example:
        >>> ident = AlgorithmIdentity("ECDSA", SignatureFormat.DER_SEQUENCE)
        >>> ident.family()
        <AlgorithmFamily.DSA_FAMILY: 'dsa_family'>
    """

    name: str
    signature_format: SignatureFormat = SignatureFormat.STANDARD

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Algorithm name must not be empty")

    def family(self, config: Optional[LegacyParserConfig] = None) -> AlgorithmFamily:
        """Семейство алгоритма (см. family_for)."""
        return family_for(self.name, config)


__all__ = [
    "AlgorithmFamily",
    "SignatureFormat",
    "AlgorithmIdentity",
    "family_for",
]
