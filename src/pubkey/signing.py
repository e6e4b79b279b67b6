"""
Signer/Verifier поверх cryptography, управляемые SignatureOptions.

Back end получает SignatureOptions (построенные через with_X() или
разобранные из legacy-строки) и при создании signer/verifier проверяет,
что комбинация опций поддерживается; иначе создание завершается ошибкой.

Поддерживаемые семейства:
    - EdDSA (Ed25519, Ed448) — только pure вариант, общая проверка
      validate_for_hash_based_signature()
    - ECDSA / DSA — хеш обязателен, DER или r||s, RFC 6979 по запросу
    - RSA — PKCS1v15 (включая "Raw" + prehash), PSS, PSS_Raw

Dependencies:
    - cryptography: все операции с ключами

Example:
    >>> from cryptography.hazmat.primitives.asymmetric import ec
    >>> from src.pubkey.signing import signer_from_legacy, verifier_from_legacy
    >>> key = ec.generate_private_key(ec.SECP256R1())
    >>> signer = signer_from_legacy(key, "EMSA1(SHA-256)")
    >>> sig = signer.sign(b"Document v1.0")
    >>> len(sig)
    64
    >>> verifier_from_legacy(key.public_key(), "SHA-256").verify(b"Document v1.0", sig)
    True

Security Notes:
    - verify() возвращает bool и НЕ выбрасывает исключения при
      невалидной подписи
    - Флаг deterministic игнорируется при проверке

Version: 1.0
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import (
    dsa,
    ec,
    ed448,
    ed25519,
    padding as rsa_padding,
    rsa,
    utils as asym_utils,
)

from src.pubkey.checks import validate_for_hash_based_signature
from src.pubkey.config import LegacyParserConfig
from src.pubkey.exceptions import (
    AlgorithmLookupError,
    InvalidArgumentError,
    ProviderNotFoundError,
    SigningFailedError,
)
from src.pubkey.legacy import parse_legacy_options
from src.pubkey.metadata import (
    AlgorithmFamily,
    AlgorithmIdentity,
    SignatureFormat,
    family_for,
)
from src.pubkey.options import SignatureOptions

logger = logging.getLogger(__name__)

__all__: list[str] = [
    "Signer",
    "Verifier",
    "create_signer",
    "create_verifier",
    "signer_from_legacy",
    "verifier_from_legacy",
    "algorithm_identity",
    "hash_algorithm",
]


# ==============================================================================
# TYPE ALIASES
# ==============================================================================

PrivateKey = Union[
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    dsa.DSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
]

PublicKey = Union[
    rsa.RSAPublicKey,
    ec.EllipticCurvePublicKey,
    dsa.DSAPublicKey,
    ed25519.Ed25519PublicKey,
    ed448.Ed448PublicKey,
]

_KEY_NAMES = (
    ((rsa.RSAPrivateKey, rsa.RSAPublicKey), "RSA"),
    ((ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey), "ECDSA"),
    ((dsa.DSAPrivateKey, dsa.DSAPublicKey), "DSA"),
    ((ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey), "Ed25519"),
    ((ed448.Ed448PrivateKey, ed448.Ed448PublicKey), "Ed448"),
)

_HASHES: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "SHA-1": hashes.SHA1,
    "SHA-224": hashes.SHA224,
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
    "SHA-512-256": hashes.SHA512_256,
    "SHA-3(224)": hashes.SHA3_224,
    "SHA-3(256)": hashes.SHA3_256,
    "SHA-3(384)": hashes.SHA3_384,
    "SHA-3(512)": hashes.SHA3_512,
    "SM3": hashes.SM3,
}


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def algorithm_identity(
    key: Union[PrivateKey, PublicKey],
    signature_format: SignatureFormat = SignatureFormat.STANDARD,
) -> AlgorithmIdentity:
    """
    Каноническая идентичность алгоритма для ключа cryptography.

    Raises:
        AlgorithmLookupError: Тип ключа не поддерживается
    """
    for key_types, name in _KEY_NAMES:
        if isinstance(key, key_types):
            return AlgorithmIdentity(name, signature_format)
    raise AlgorithmLookupError(
        f"Unsupported key type {type(key).__name__} for signatures"
    )


def hash_algorithm(name: str, algo_name: str) -> hashes.HashAlgorithm:
    """
    Объект хеша cryptography по имени ("SHA-256", "SHA-3(256)", "SM3").

    Raises:
        AlgorithmLookupError: Хеш неизвестен или это "Raw"
    """
    factory = _HASHES.get(name)
    if factory is None:
        raise AlgorithmLookupError(
            f"Hash function {name} not available for {algo_name}",
            algorithm=algo_name,
            context={"hash": name},
        )
    return factory()


def _check_provider(options: SignatureOptions, algo_name: str) -> None:
    if options.provider is not None:
        raise ProviderNotFoundError(algo_name, options.provider)


def _reject(options: SignatureOptions, algo_name: str, *, der: bool, context: bool) -> None:
    if der and options.using_der_encoded_signature():
        raise InvalidArgumentError(
            f"{algo_name} does not support DER encoded signatures", algorithm=algo_name
        )
    if context and options.using_context():
        raise InvalidArgumentError(
            f"{algo_name} does not support a signature context", algorithm=algo_name
        )


# ==============================================================================
# SCHEMES
# ==============================================================================


class _Scheme:
    """Проверенная комбинация опций для одного семейства алгоритмов."""

    def __init__(self, algo_name: str, options: SignatureOptions) -> None:
        self.algo_name = algo_name
        self.options = options

    def sign(self, key: PrivateKey, message: bytes) -> bytes:
        raise NotImplementedError

    def verify(self, key: PublicKey, message: bytes, signature: bytes) -> None:
        """Raises InvalidSignature (или ValueError) при невалидной подписи."""
        raise NotImplementedError


class _EdDSAScheme(_Scheme):
    def __init__(self, algo_name: str, options: SignatureOptions) -> None:
        super().__init__(algo_name, options)
        validate_for_hash_based_signature(options, algo_name)
        _reject(options, algo_name, der=True, context=True)

    def sign(self, key: PrivateKey, message: bytes) -> bytes:
        if not isinstance(key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
            raise InvalidArgumentError(
                f"Expected {self.algo_name} private key", algorithm=self.algo_name
            )
        return key.sign(message)

    def verify(self, key: PublicKey, message: bytes, signature: bytes) -> None:
        if not isinstance(key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            raise InvalidArgumentError(
                f"Expected {self.algo_name} public key", algorithm=self.algo_name
            )
        key.verify(signature, message)


class _DSAFamilyScheme(_Scheme):
    """
    ECDSA и DSA.

    Без DER подпись — конкатенация r || s, каждая компонента
    фиксированной ширины (размер порядка группы в байтах).
    """

    def __init__(self, algo_name: str, options: SignatureOptions) -> None:
        super().__init__(algo_name, options)
        if options.using_padding():
            raise InvalidArgumentError(
                f"{algo_name} does not support padding modes", algorithm=algo_name
            )
        if options.using_prehash():
            raise InvalidArgumentError(
                f"{algo_name} does not support prehashing", algorithm=algo_name
            )
        _reject(options, algo_name, der=False, context=True)
        self._hash = hash_algorithm(options.hash_function_name(), algo_name)

    def _component_size(self, key: Union[PrivateKey, PublicKey]) -> int:
        if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
            return (key.curve.key_size + 7) // 8
        if isinstance(key, (dsa.DSAPrivateKey, dsa.DSAPublicKey)):
            q = key.parameters().parameter_numbers().q
            return (q.bit_length() + 7) // 8
        raise InvalidArgumentError(
            f"Expected {self.algo_name} key", algorithm=self.algo_name
        )

    def sign(self, key: PrivateKey, message: bytes) -> bytes:
        if isinstance(key, ec.EllipticCurvePrivateKey):
            der = key.sign(
                message,
                ec.ECDSA(
                    self._hash,
                    deterministic_signing=self.options.using_deterministic_signature(),
                ),
            )
        elif isinstance(key, dsa.DSAPrivateKey):
            der = key.sign(message, self._hash)
        else:
            raise InvalidArgumentError(
                f"Expected {self.algo_name} private key", algorithm=self.algo_name
            )

        if self.options.using_der_encoded_signature():
            return der

        r, s = asym_utils.decode_dss_signature(der)
        size = self._component_size(key)
        return r.to_bytes(size, "big") + s.to_bytes(size, "big")

    def verify(self, key: PublicKey, message: bytes, signature: bytes) -> None:
        if not self.options.using_der_encoded_signature():
            size = self._component_size(key)
            if len(signature) != 2 * size:
                raise InvalidSignature()
            r = int.from_bytes(signature[:size], "big")
            s = int.from_bytes(signature[size:], "big")
            signature = asym_utils.encode_dss_signature(r, s)

        if isinstance(key, ec.EllipticCurvePublicKey):
            key.verify(signature, message, ec.ECDSA(self._hash))
        elif isinstance(key, dsa.DSAPublicKey):
            key.verify(signature, message, self._hash)
        else:
            raise InvalidArgumentError(
                f"Expected {self.algo_name} public key", algorithm=self.algo_name
            )


class _RSAScheme(_Scheme):
    """RSA: PKCS1v15, PKCS1v15(Raw,Hash), PSS, PSS_Raw."""

    _algorithm: Union[hashes.HashAlgorithm, asym_utils.Prehashed]
    _digest: hashes.HashAlgorithm

    def __init__(self, algo_name: str, options: SignatureOptions) -> None:
        super().__init__(algo_name, options)
        if not options.using_padding():
            raise InvalidArgumentError(
                f"{algo_name} signature requires a padding scheme",
                algorithm=algo_name,
            )
        _reject(options, algo_name, der=True, context=True)

        padding_name = options.padding
        if padding_name not in ("PKCS1v15", "PSS", "PSS_Raw"):
            raise AlgorithmLookupError(
                f"Padding {padding_name} not available for {algo_name}",
                algorithm=algo_name,
                context={"padding": padding_name},
            )

        hash_name = options.hash_function_name()
        if padding_name == "PKCS1v15":
            self._init_pkcs1v15(hash_name)
        else:
            if options.using_prehash():
                raise InvalidArgumentError(
                    f"{padding_name} does not support prehashing", algorithm=algo_name
                )
            digest = hash_algorithm(hash_name, algo_name)
            self._digest = digest
            self._algorithm = (
                asym_utils.Prehashed(digest) if padding_name == "PSS_Raw" else digest
            )

    def _init_pkcs1v15(self, hash_name: str) -> None:
        if hash_name == "Raw":
            # message is an already computed digest of the prehash function
            prehash = self.options.prehash_function
            if not self.options.using_prehash() or prehash is None:
                raise AlgorithmLookupError(
                    "PKCS1v15(Raw) without a prehash function is not available",
                    algorithm=self.algo_name,
                )
            self._algorithm = asym_utils.Prehashed(
                hash_algorithm(prehash, self.algo_name)
            )
        else:
            if self.options.using_prehash():
                raise InvalidArgumentError(
                    "PKCS1v15 prehash requires the Raw hash", algorithm=self.algo_name
                )
            self._algorithm = hash_algorithm(hash_name, self.algo_name)

    def _padding(self, signing: bool) -> rsa_padding.AsymmetricPadding:
        if self.options.padding == "PKCS1v15":
            return rsa_padding.PKCS1v15()

        salt = self.options.salt_size
        if salt is None:
            salt = rsa_padding.PSS.DIGEST_LENGTH if signing else rsa_padding.PSS.AUTO
        return rsa_padding.PSS(mgf=rsa_padding.MGF1(self._digest), salt_length=salt)

    def sign(self, key: PrivateKey, message: bytes) -> bytes:
        if not isinstance(key, rsa.RSAPrivateKey):
            raise InvalidArgumentError(
                f"Expected {self.algo_name} private key", algorithm=self.algo_name
            )
        return key.sign(message, self._padding(signing=True), self._algorithm)

    def verify(self, key: PublicKey, message: bytes, signature: bytes) -> None:
        if not isinstance(key, rsa.RSAPublicKey):
            raise InvalidArgumentError(
                f"Expected {self.algo_name} public key", algorithm=self.algo_name
            )
        key.verify(signature, message, self._padding(signing=False), self._algorithm)


def _scheme_for(algo_name: str, options: SignatureOptions) -> _Scheme:
    _check_provider(options, algo_name)

    family = family_for(algo_name)
    if family in (AlgorithmFamily.ED25519, AlgorithmFamily.ED448):
        return _EdDSAScheme(algo_name, options)
    if family == AlgorithmFamily.RSA:
        return _RSAScheme(algo_name, options)
    if family == AlgorithmFamily.DSA_FAMILY:
        return _DSAFamilyScheme(algo_name, options)
    raise AlgorithmLookupError(
        f"No signature backend for {algo_name}", algorithm=algo_name
    )


# ==============================================================================
# PUBLIC API
# ==============================================================================


class Signer:
    """
    Генерация подписи ключом cryptography с заданными опциями.

    Attributes:
        algorithm_name: "RSA", "ECDSA", "DSA", "Ed25519" или "Ed448"
        options: Опции, с которыми создан signer

    Raises (при создании):
        InvalidArgumentError: Опция не поддерживается алгоритмом
        AlgorithmLookupError: Хеш/padding/провайдер недоступен
        InvalidStateError: Не задан обязательный хеш

    Example:
        >>> key = ed25519.Ed25519PrivateKey.generate()
        >>> sig = Signer(key, SignatureOptions()).sign(b"msg")
        >>> len(sig)
        64
    """

    def __init__(self, private_key: PrivateKey, options: SignatureOptions) -> None:
        self.algorithm_name = algorithm_identity(private_key).name
        self.options = options
        self._key = private_key
        self._scheme = _scheme_for(self.algorithm_name, options)
        logger.debug(
            "Created %s signer with options %s", self.algorithm_name, options.to_dict()
        )

    def sign(self, message: bytes) -> bytes:
        """
        Создать подпись.

        Raises:
            TypeError: message не bytes
            SigningFailedError: Ошибка библиотеки при подписи
        """
        if not isinstance(message, bytes):
            raise TypeError("message must be bytes")

        try:
            return self._scheme.sign(self._key, message)
        except InvalidArgumentError:
            raise
        except Exception as exc:
            raise SigningFailedError(
                f"{self.algorithm_name} signing failed", algorithm=self.algorithm_name
            ) from exc


class Verifier:
    """
    Проверка подписи публичным ключом cryptography с заданными опциями.

    Example:
        >>> verifier = Verifier(key.public_key(), SignatureOptions())
        >>> verifier.verify(b"msg", sig)
        True
    """

    def __init__(self, public_key: PublicKey, options: SignatureOptions) -> None:
        self.algorithm_name = algorithm_identity(public_key).name
        self.options = options
        self._key = public_key
        self._scheme = _scheme_for(self.algorithm_name, options)
        logger.debug(
            "Created %s verifier with options %s",
            self.algorithm_name,
            options.to_dict(),
        )

    def verify(self, message: bytes, signature: bytes) -> bool:
        """
        Проверить подпись.

        Returns:
            True если подпись валидна, False иначе

        Raises:
            TypeError: message или signature не bytes
        """
        if not isinstance(message, bytes) or not isinstance(signature, bytes):
            raise TypeError("message and signature must be bytes")

        try:
            self._scheme.verify(self._key, message, signature)
            return True
        except InvalidArgumentError:
            raise
        except (InvalidSignature, ValueError):
            return False


def create_signer(private_key: PrivateKey, options: SignatureOptions) -> Signer:
    return Signer(private_key, options)


def create_verifier(public_key: PublicKey, options: SignatureOptions) -> Verifier:
    return Verifier(public_key, options)


def signer_from_legacy(
    private_key: PrivateKey,
    params: str,
    signature_format: SignatureFormat = SignatureFormat.STANDARD,
    *,
    provider: Optional[str] = None,
    config: Optional[LegacyParserConfig] = None,
) -> Signer:
    """
    Создать signer из legacy-строки параметров.

    Example:
        >>> signer = signer_from_legacy(rsa_key, "EMSA4(SHA-256)")
        >>> signer.options.padding
        'PSS'
    """
    identity = algorithm_identity(private_key, signature_format)
    options = parse_legacy_options(identity, params, provider=provider, config=config)
    return Signer(private_key, options)


def verifier_from_legacy(
    public_key: PublicKey,
    params: str,
    signature_format: SignatureFormat = SignatureFormat.STANDARD,
    *,
    provider: Optional[str] = None,
    config: Optional[LegacyParserConfig] = None,
) -> Verifier:
    """Создать verifier из legacy-строки параметров."""
    identity = algorithm_identity(public_key, signature_format)
    options = parse_legacy_options(identity, params, provider=provider, config=config)
    return Verifier(public_key, options)
