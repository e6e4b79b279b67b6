"""
Разбор legacy-строк параметров подписи.

Переводит исторические однострочные форматы параметров
("EMSA1(SHA-256)", "PSS(SHA-256,MGF1,32)", "Ed25519ph", "Deterministic")
в SignatureOptions — то же значение, которое вызывающий код построил бы
сегодня через with_X().

Архитектура:
    - family_for() сопоставляет имя алгоритма закрытому перечислению
      AlgorithmFamily (единственное место сравнения имён алгоритмов)
    - _FAMILY_PARSERS: AlgorithmFamily -> функция разбора грамматики
      одного семейства
    - _RSA_PADDING_PARSERS: каноническое имя padding -> функция разбора

Грамматики семейств:
    - Post-quantum: "", "Randomized", "Deterministic"
    - SM2: "", "UserID", "UserID,Hash"
    - Ed25519/Ed448: "", "Identity", "Pure", "Ed25519ph"/"Ed448ph",
      либо имя хеша для prehash
    - RSA: padding-спецификация с историческими псевдонимами
    - DSA/ECDSA/ECKCDSA: "", "EMSA1(Hash)", "Hash"

Example:
    >>> from src.pubkey.legacy import parse_legacy_options
    >>> opts = parse_legacy_options("RSA", "EMSA4(SHA-256,MGF1,32)")
    >>> opts.padding, opts.hash_function, opts.salt_size
    ('PSS', 'SHA-256', 32)
    >>> parse_legacy_options("Ed25519", "Ed25519ph").using_prehash()
    True

Errors:
    InvalidArgumentError — некорректный ввод (неверное число параметров,
    неизвестный флаг); AlgorithmLookupError — распознанное семейство
    padding с неподдерживаемой формой параметров.

Thread Safety:
    Чистая функция от (алгоритм, строка параметров, формат); таблицы
    разбора неизменяемы.

Version: 1.0
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Final, Mapping, Optional, Union

from src.pubkey.config import DEFAULT_PARSER_CONFIG, LegacyParserConfig
from src.pubkey.exceptions import AlgorithmLookupError, InvalidArgumentError
from src.pubkey.metadata import (
    AlgorithmFamily,
    AlgorithmIdentity,
    SignatureFormat,
    family_for,
)
from src.pubkey.options import SignatureOptions
from src.pubkey.scan_name import ScanName

logger = logging.getLogger(__name__)

__all__: list[str] = ["parse_legacy_options"]

FamilyParser = Callable[
    [str, str, SignatureFormat, LegacyParserConfig], SignatureOptions
]
PaddingParser = Callable[[ScanName, str], SignatureOptions]


# ==============================================================================
# POST-QUANTUM (Dilithium / ML-DSA / SLH-DSA / SPHINCS+)
# ==============================================================================


def _parse_post_quantum(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    if params not in ("", "Randomized", "Deterministic"):
        raise InvalidArgumentError(
            f"Unexpected parameters for signing with {algo_name}",
            algorithm=algo_name,
        )

    options = SignatureOptions()
    if params == "Deterministic":
        options = options.with_deterministic_signature()
    return options


# ==============================================================================
# SM2
# ==============================================================================


def _parse_sm2(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    if params == "":
        return SignatureOptions(config.sm2_default_hash)

    # "UserID,Hash": only the first comma separates the user ID
    userid, comma, hash_fn = params.partition(",")
    if comma:
        return SignatureOptions(hash_fn).with_context(userid)
    return SignatureOptions(config.sm2_default_hash).with_context(params)


# ==============================================================================
# EdDSA
# ==============================================================================


def _parse_eddsa(
    params: str, prehash_trigger: str, pure_names: tuple[str, ...]
) -> SignatureOptions:
    options = SignatureOptions()
    if params in pure_names:
        return options
    if params == prehash_trigger:
        return options.with_prehash()
    return options.with_prehash(params)


def _parse_ed25519(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    return _parse_eddsa(params, "Ed25519ph", ("", "Identity", "Pure"))


def _parse_ed448(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    return _parse_eddsa(params, "Ed448ph", ("", "Identity", "Pure", "Ed448"))


# ==============================================================================
# RSA PADDING
# ==============================================================================


def _parse_raw(req: ScanName, algo_name: str) -> SignatureOptions:
    options = SignatureOptions().with_padding("Raw")
    if req.arg_count() == 0:
        return options
    if req.arg_count() == 1:
        return options.with_prehash(req.arg(0))
    raise InvalidArgumentError(
        "Raw padding with more than one parameter", algorithm=algo_name
    )


def _parse_pkcs1v15(req: ScanName, algo_name: str) -> SignatureOptions:
    if req.arg_count() == 1:
        return SignatureOptions(req.arg(0)).with_padding("PKCS1v15")
    if req.arg_count() == 2 and req.arg(0) == "Raw":
        return (
            SignatureOptions(req.arg(0))
            .with_padding("PKCS1v15")
            .with_prehash(req.arg(1))
        )
    raise AlgorithmLookupError(
        "PKCS1v15 padding parameters not supported", algorithm=algo_name
    )


def _make_pss_parser(padding_name: str) -> PaddingParser:
    def parse(req: ScanName, algo_name: str) -> SignatureOptions:
        if req.arg_count_between(1, 3) and req.arg(1, "MGF1") == "MGF1":
            options = SignatureOptions(req.arg(0)).with_padding(padding_name)
            if req.arg_count() == 3:
                options = options.with_salt_size(req.arg_as_integer(2))
            return options
        raise AlgorithmLookupError(
            f"{padding_name} padding parameters not supported", algorithm=algo_name
        )

    return parse


def _parse_iso_9796_ds2(req: ScanName, algo_name: str) -> SignatureOptions:
    if not req.arg_count_between(1, 3):
        raise AlgorithmLookupError(
            "ISO_9796_DS2 padding parameters not supported", algorithm=algo_name
        )

    implicit = req.arg(1, "exp") == "imp"
    options = SignatureOptions(req.arg(0)).with_padding("ISO_9796_DS2")

    # TODO: confirm whether an implicit trailer with an explicit salt size
    # is meant to be accepted; it is passed through unchanged for now.
    if req.arg_count() == 3:
        options = options.with_salt_size(req.arg_as_integer(2))
    if not implicit:
        options = options.with_explicit_trailer_field()
    return options


def _parse_iso_9796_ds3(req: ScanName, algo_name: str) -> SignatureOptions:
    # DS3 is deterministic, no salt
    if not req.arg_count_between(1, 2):
        raise AlgorithmLookupError(
            "ISO_9796_DS3 padding parameters not supported", algorithm=algo_name
        )

    options = SignatureOptions(req.arg(0)).with_padding("ISO_9796_DS3")
    if req.arg_count() == 2 and req.arg(1) != "imp":
        options = options.with_explicit_trailer_field()
    return options


def _parse_x931(req: ScanName, algo_name: str) -> SignatureOptions:
    if req.arg_count() == 1:
        return SignatureOptions(req.arg(0)).with_padding("X9.31")
    raise AlgorithmLookupError(
        "X9.31 padding parameters not supported", algorithm=algo_name
    )


_RSA_PADDING_PARSERS: Final[Mapping[str, PaddingParser]] = MappingProxyType(
    {
        "Raw": _parse_raw,
        "PKCS1v15": _parse_pkcs1v15,
        "PSS": _make_pss_parser("PSS"),
        "PSS_Raw": _make_pss_parser("PSS_Raw"),
        "ISO_9796_DS2": _parse_iso_9796_ds2,
        "ISO_9796_DS3": _parse_iso_9796_ds3,
        "X9.31": _parse_x931,
    }
)


def _parse_rsa(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    if params == "":
        raise InvalidArgumentError(
            f"{algo_name} signature requires a padding scheme", algorithm=algo_name
        )

    req = ScanName(params)
    padding = config.canonical_padding(req.algo_name)
    if padding != req.algo_name:
        logger.warning(
            "Deprecated padding name %s used for %s, prefer %s",
            req.algo_name,
            algo_name,
            padding,
        )

    parser = _RSA_PADDING_PARSERS.get(padding)
    if parser is None:
        raise AlgorithmLookupError(
            f"Padding scheme {req.algo_name} not supported",
            algorithm=algo_name,
            context={"padding": req.algo_name},
        )
    return parser(req, algo_name)


# ==============================================================================
# DSA / ECDSA / ECKCDSA AND EVERYTHING ELSE
# ==============================================================================


def _parse_dsa_family(
    algo_name: str,
    params: str,
    signature_format: SignatureFormat,
    config: LegacyParserConfig,
) -> SignatureOptions:
    options = SignatureOptions()

    if params.startswith("EMSA1(") and params.endswith(")"):
        options = options.with_hash(params[len("EMSA1(") : -1])
    elif params != "":
        options = options.with_hash(params)

    if signature_format == SignatureFormat.DER_SEQUENCE:
        options = options.with_der_encoded_signature()
    return options


_FAMILY_PARSERS: Final[Mapping[AlgorithmFamily, FamilyParser]] = MappingProxyType(
    {
        AlgorithmFamily.POST_QUANTUM: _parse_post_quantum,
        AlgorithmFamily.SM2: _parse_sm2,
        AlgorithmFamily.ED25519: _parse_ed25519,
        AlgorithmFamily.ED448: _parse_ed448,
        AlgorithmFamily.RSA: _parse_rsa,
        AlgorithmFamily.DSA_FAMILY: _parse_dsa_family,
    }
)


# ==============================================================================
# ENTRY POINT
# ==============================================================================


def parse_legacy_options(
    algorithm: Union[str, AlgorithmIdentity],
    params: str,
    signature_format: Optional[SignatureFormat] = None,
    *,
    provider: Optional[str] = None,
    config: Optional[LegacyParserConfig] = None,
) -> SignatureOptions:
    """
    Построить SignatureOptions из legacy-строки параметров.

    Args:
        algorithm: Каноническое имя алгоритма ключа или AlgorithmIdentity
        params: Legacy-строка параметров ("" допустима для большинства
            семейств)
        signature_format: Формат подписи; по умолчанию берётся из
            AlgorithmIdentity, иначе STANDARD
        provider: Предпочитаемая реализация ("" и "base" — не задана)
        config: Конфигурация разбора (по умолчанию DEFAULT_PARSER_CONFIG)

    Returns:
        Заполненный SignatureOptions

    Raises:
        InvalidArgumentError: Некорректная или противоречивая строка
        AlgorithmLookupError: Неподдерживаемая форма параметров padding

    Example:
        >>> opts = parse_legacy_options("SM2", "1234567812345678,SHA-256")
        >>> opts.context, opts.hash_function
        (b'1234567812345678', 'SHA-256')
        >>> opts = parse_legacy_options(
        ...     "ECDSA", "EMSA1(SHA-384)", SignatureFormat.DER_SEQUENCE
        ... )
        >>> opts.hash_function, opts.using_der_encoded_signature()
        ('SHA-384', True)
    """
    if isinstance(algorithm, AlgorithmIdentity):
        identity = algorithm
        if signature_format is not None:
            identity = AlgorithmIdentity(identity.name, signature_format)
    else:
        identity = AlgorithmIdentity(
            algorithm, signature_format or SignatureFormat.STANDARD
        )

    if not isinstance(params, str):
        raise TypeError(f"params must be str, got {type(params).__name__}")

    config = config or DEFAULT_PARSER_CONFIG
    family = identity.family(config)

    options = _FAMILY_PARSERS[family](
        identity.name, params, identity.signature_format, config
    )
    options = options.with_provider(provider)

    logger.debug(
        "Parsed legacy params %r for %s (%s): %s",
        params,
        identity.name,
        family.label(),
        options.to_dict(),
    )
    return options
