# -*- coding: utf-8 -*-
"""
RU: Конфигурация разбора legacy-параметров подписи: префиксы имён
постквантовых алгоритмов, хеш SM2 по умолчанию и таблица исторических
псевдонимов padding для RSA.
EN: Legacy signature parameter parsing configuration: post-quantum
algorithm name prefixes, SM2 default hash and the historical RSA padding
alias table.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Mapping, Optional, Tuple

_LOGGER: Final = logging.getLogger(__name__)


# Historical RSA padding names -> canonical names
RSA_PADDING_ALIASES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "EMSA_PKCS1": "PKCS1v15",
        "EMSA-PKCS1-v1_5": "PKCS1v15",
        "EMSA3": "PKCS1v15",
        "PSSR_Raw": "PSS_Raw",
        "PSSR": "PSS",
        "EMSA-PSS": "PSS",
        "PSS-MGF1": "PSS",
        "EMSA4": "PSS",
        "EMSA_X931": "X9.31",
        "EMSA2": "X9.31",
        "X9.31": "X9.31",
    }
)

_DEFAULT_PQ_PREFIXES: Final[Tuple[str, ...]] = ("Dilithium", "ML-DSA", "SLH-DSA")
_DEFAULT_PQ_NAMES: Final[Tuple[str, ...]] = ("SPHINCS+",)


@dataclass(frozen=True)
class LegacyParserConfig:
    """
    Legacy parameter parser configuration.

    Attributes:
        pq_prefixes: Algorithm name prefixes handled by the
            randomized/deterministic post-quantum grammar.
        pq_names: Exact algorithm names handled by the same grammar.
        sm2_default_hash: Hash used for SM2 when none is given.
        padding_aliases: Historical RSA padding name -> canonical name.

    Examples:
        >>> cfg = LegacyParserConfig()
        >>> cfg.is_post_quantum("Dilithium3")
        True

        >>> cfg = LegacyParserConfig(sm2_default_hash="SHA-256")
        >>> cfg.sm2_default_hash
        'SHA-256'
    """

    pq_prefixes: Tuple[str, ...] = _DEFAULT_PQ_PREFIXES
    pq_names: Tuple[str, ...] = _DEFAULT_PQ_NAMES
    sm2_default_hash: str = "SM3"
    padding_aliases: Mapping[str, str] = field(
        default_factory=lambda: RSA_PADDING_ALIASES
    )

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not self.sm2_default_hash:
            raise ValueError("sm2_default_hash must not be empty")
        if any(not p for p in self.pq_prefixes):
            raise ValueError("pq_prefixes must not contain empty prefixes")
        for alias, canonical in self.padding_aliases.items():
            if not alias or not canonical:
                raise ValueError("padding_aliases entries must not be empty")

    def is_post_quantum(self, algo_name: str) -> bool:
        """True if algo_name uses the randomized/deterministic grammar."""
        return algo_name in self.pq_names or algo_name.startswith(self.pq_prefixes)

    def canonical_padding(self, padding_name: str) -> str:
        """Map a historical padding name to its canonical name."""
        return self.padding_aliases.get(padding_name, padding_name)

    @staticmethod
    def from_mapping(
        mapping: Optional[Mapping[str, Any]] = None,
    ) -> "LegacyParserConfig":
        """
        Create configuration from a loaded config mapping.

        Recognized keys: ``pq_prefixes``, ``pq_names``, ``sm2_default_hash``,
        ``padding_aliases`` (merged over the built-in alias table).
        Unknown keys are ignored.

        Args:
            mapping: Typically the result of ``src.load_config()``.

        Returns:
            LegacyParserConfig instance.

        Raises:
            ValueError: if a recognized key has an invalid value.

        Examples:
            >>> LegacyParserConfig.from_mapping({"sm2_default_hash": "SHA-256"})
            LegacyParserConfig(..., sm2_default_hash='SHA-256', ...)
        """
        if not mapping:
            return DEFAULT_PARSER_CONFIG

        kwargs: dict[str, Any] = {}
        if "pq_prefixes" in mapping:
            kwargs["pq_prefixes"] = _as_str_tuple("pq_prefixes", mapping["pq_prefixes"])
        if "pq_names" in mapping:
            kwargs["pq_names"] = _as_str_tuple("pq_names", mapping["pq_names"])
        if "sm2_default_hash" in mapping:
            value = mapping["sm2_default_hash"]
            if not isinstance(value, str):
                raise ValueError("sm2_default_hash must be a string")
            kwargs["sm2_default_hash"] = value
        if "padding_aliases" in mapping:
            extra = mapping["padding_aliases"]
            if not isinstance(extra, Mapping):
                raise ValueError("padding_aliases must be an object")
            merged = dict(RSA_PADDING_ALIASES)
            merged.update({str(k): str(v) for k, v in extra.items()})
            kwargs["padding_aliases"] = MappingProxyType(merged)

        if not kwargs:
            return DEFAULT_PARSER_CONFIG

        _LOGGER.debug("Legacy parser config overrides: %s", sorted(kwargs))
        return LegacyParserConfig(**kwargs)


def _as_str_tuple(key: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list of strings")
    if not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key} must be a list of strings")
    return tuple(value)


DEFAULT_PARSER_CONFIG: Final[LegacyParserConfig] = LegacyParserConfig()


__all__ = [
    "RSA_PADDING_ALIASES",
    "LegacyParserConfig",
    "DEFAULT_PARSER_CONFIG",
]
