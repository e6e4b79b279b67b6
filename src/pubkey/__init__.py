"""
Параметры цифровой подписи: SignatureOptions, разбор legacy-строк
параметров, общие проверки опций и Signer/Verifier поверх cryptography.

EN: Signature options API. Single import point for the options value, the
legacy parameter parser, the generic validator and the signature back ends.
"""

from .exceptions import (
    AlgorithmLookupError,
    InvalidArgumentError,
    InvalidStateError,
    OptionAlreadySetError,
    ProviderNotFoundError,
    SignatureOptionsError,
    SigningFailedError,
)
from .config import DEFAULT_PARSER_CONFIG, LegacyParserConfig
from .metadata import AlgorithmFamily, AlgorithmIdentity, SignatureFormat, family_for
from .scan_name import ScanName
from .options import SignatureOptions
from .checks import validate_for_hash_based_signature
from .legacy import parse_legacy_options
from .signing import (
    Signer,
    Verifier,
    create_signer,
    create_verifier,
    signer_from_legacy,
    verifier_from_legacy,
)

__all__ = [
    # Errors
    "SignatureOptionsError",
    "OptionAlreadySetError",
    "InvalidArgumentError",
    "AlgorithmLookupError",
    "ProviderNotFoundError",
    "InvalidStateError",
    "SigningFailedError",
    # Configuration / identity
    "LegacyParserConfig",
    "DEFAULT_PARSER_CONFIG",
    "AlgorithmFamily",
    "AlgorithmIdentity",
    "SignatureFormat",
    "family_for",
    "ScanName",
    # Options
    "SignatureOptions",
    "validate_for_hash_based_signature",
    "parse_legacy_options",
    # Backends
    "Signer",
    "Verifier",
    "create_signer",
    "create_verifier",
    "signer_from_legacy",
    "verifier_from_legacy",
]
