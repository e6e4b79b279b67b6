"""
Unit-тесты для модуля signing.py.

Проверяет Signer/Verifier поверх cryptography: EdDSA, ECDSA (r||s и DER,
детерминированная подпись), DSA, RSA (PKCS1v15, PSS, PSS_Raw,
PKCS1v15(Raw,Hash)), а также отказ от неподдерживаемых опций при
создании signer/verifier.
"""

from __future__ import annotations

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import (
    dsa,
    ec,
    ed448,
    ed25519,
    rsa,
    x25519,
)

from src.pubkey.exceptions import (
    AlgorithmLookupError,
    InvalidArgumentError,
    InvalidStateError,
    ProviderNotFoundError,
    SigningFailedError,
)
from src.pubkey.metadata import SignatureFormat
from src.pubkey.options import SignatureOptions
from src.pubkey.signing import (
    Signer,
    Verifier,
    algorithm_identity,
    create_signer,
    create_verifier,
    hash_algorithm,
    signer_from_legacy,
    verifier_from_legacy,
)

MESSAGE = b"Document v1.0"


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture(scope="module")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="module")
def dsa_key() -> dsa.DSAPrivateKey:
    return dsa.generate_private_key(key_size=2048)


# ==============================================================================
# HELPERS
# ==============================================================================


class TestHelpers:
    """Тесты algorithm_identity() и hash_algorithm()."""

    def test_identity_for_keys(
        self, rsa_key: rsa.RSAPrivateKey, ec_key: ec.EllipticCurvePrivateKey
    ) -> None:
        """Тест: имя алгоритма по типу ключа."""
        assert algorithm_identity(rsa_key).name == "RSA"
        assert algorithm_identity(ec_key.public_key()).name == "ECDSA"
        assert algorithm_identity(ed448.Ed448PrivateKey.generate()).name == "Ed448"

    def test_identity_format(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: формат подписи сохраняется."""
        identity = algorithm_identity(ec_key, SignatureFormat.DER_SEQUENCE)

        assert identity.signature_format is SignatureFormat.DER_SEQUENCE

    def test_identity_unsupported_key(self) -> None:
        """Тест: ключ не для подписи."""
        with pytest.raises(AlgorithmLookupError):
            algorithm_identity(x25519.X25519PrivateKey.generate())  # type: ignore[arg-type]

    def test_hash_algorithm(self) -> None:
        """Тест: сопоставление имён хешей."""
        assert hash_algorithm("SHA-256", "RSA").name == "sha256"
        assert hash_algorithm("SHA-3(512)", "RSA").name == "sha3-512"

    @pytest.mark.parametrize("name", ["Raw", "MD5", "sha-256"])
    def test_hash_algorithm_unknown(self, name: str) -> None:
        """Тест: неизвестный хеш."""
        with pytest.raises(AlgorithmLookupError):
            hash_algorithm(name, "RSA")


# ==============================================================================
# EdDSA
# ==============================================================================


class TestEdDSA:
    """Тесты Ed25519/Ed448."""

    @pytest.mark.parametrize(
        "key_factory,size",
        [
            (ed25519.Ed25519PrivateKey.generate, 64),
            (ed448.Ed448PrivateKey.generate, 114),
        ],
    )
    def test_sign_verify(self, key_factory, size: int) -> None:
        """Тест: pure EdDSA."""
        key = key_factory()

        sig = Signer(key, SignatureOptions()).sign(MESSAGE)

        assert len(sig) == size
        verifier = Verifier(key.public_key(), SignatureOptions())
        assert verifier.verify(MESSAGE, sig) is True
        assert verifier.verify(b"tampered", sig) is False

    def test_legacy_pure(self) -> None:
        """Тест: legacy-строка "Identity"."""
        key = ed25519.Ed25519PrivateKey.generate()

        sig = signer_from_legacy(key, "Identity").sign(MESSAGE)

        assert verifier_from_legacy(key.public_key(), "").verify(MESSAGE, sig)

    def test_explicit_hash_rejected(self) -> None:
        """Тест: EdDSA не принимает выбор хеша."""
        key = ed25519.Ed25519PrivateKey.generate()

        with pytest.raises(InvalidArgumentError, match="explicit hash"):
            Signer(key, SignatureOptions("SHA-512"))

    def test_prehash_rejected(self) -> None:
        """Тест: prehash вариант не реализован back end."""
        key = ed25519.Ed25519PrivateKey.generate()

        with pytest.raises(InvalidArgumentError, match="prehashing"):
            signer_from_legacy(key, "Ed25519ph")

    def test_der_rejected(self) -> None:
        """Тест: EdDSA не поддерживает DER."""
        key = ed448.Ed448PrivateKey.generate()

        with pytest.raises(InvalidArgumentError, match="DER"):
            Signer(key, SignatureOptions().with_der_encoded_signature())


# ==============================================================================
# ECDSA / DSA
# ==============================================================================


class TestDSAFamily:
    """Тесты ECDSA и DSA."""

    def test_ecdsa_plain(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: r || s фиксированной ширины."""
        sig = signer_from_legacy(ec_key, "EMSA1(SHA-256)").sign(MESSAGE)

        assert len(sig) == 64
        assert verifier_from_legacy(ec_key.public_key(), "SHA-256").verify(MESSAGE, sig)

    def test_ecdsa_der(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: DER SEQUENCE при формате DER_SEQUENCE."""
        sig = signer_from_legacy(
            ec_key, "SHA-256", SignatureFormat.DER_SEQUENCE
        ).sign(MESSAGE)

        assert sig[0] == 0x30
        public_key = ec_key.public_key()
        assert verifier_from_legacy(
            public_key, "SHA-256", SignatureFormat.DER_SEQUENCE
        ).verify(MESSAGE, sig)
        assert verifier_from_legacy(public_key, "SHA-256").verify(MESSAGE, sig) is False

    def test_ecdsa_deterministic(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: RFC 6979 даёт одинаковые подписи."""
        options = SignatureOptions("SHA-256").with_deterministic_signature()
        signer = create_signer(ec_key, options)

        assert signer.sign(MESSAGE) == signer.sign(MESSAGE)
        assert create_verifier(ec_key.public_key(), options).verify(
            MESSAGE, signer.sign(MESSAGE)
        )

    def test_ecdsa_randomized(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: без флага подписи различаются."""
        signer = create_signer(ec_key, SignatureOptions("SHA-256"))

        assert signer.sign(MESSAGE) != signer.sign(MESSAGE)

    def test_tampered_signature(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: изменённая подпись не проходит проверку."""
        sig = bytearray(create_signer(ec_key, SignatureOptions("SHA-256")).sign(MESSAGE))
        sig[-1] ^= 0x01
        verifier = create_verifier(ec_key.public_key(), SignatureOptions("SHA-256"))

        assert verifier.verify(MESSAGE, bytes(sig)) is False
        assert verifier.verify(MESSAGE, bytes(sig[:-1])) is False

    def test_dsa(self, dsa_key: dsa.DSAPrivateKey) -> None:
        """Тест: DSA с SHA-256."""
        sig = signer_from_legacy(dsa_key, "EMSA1(SHA-256)").sign(MESSAGE)

        assert len(sig) == 64
        assert verifier_from_legacy(dsa_key.public_key(), "SHA-256").verify(MESSAGE, sig)

    def test_hash_required(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: хеш обязателен."""
        with pytest.raises(InvalidStateError):
            signer_from_legacy(ec_key, "")

    def test_padding_rejected(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: ECDSA не поддерживает padding."""
        options = SignatureOptions("SHA-256").with_padding("PSS")

        with pytest.raises(InvalidArgumentError, match="padding"):
            create_signer(ec_key, options)

    def test_context_rejected(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: контекст не поддерживается."""
        options = SignatureOptions("SHA-256").with_context(b"ctx")

        with pytest.raises(InvalidArgumentError, match="context"):
            create_signer(ec_key, options)

    def test_unknown_hash(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: неизвестный хеш."""
        with pytest.raises(AlgorithmLookupError):
            signer_from_legacy(ec_key, "EMSA1(Whirlpool)")


# ==============================================================================
# RSA
# ==============================================================================


class TestRSA:
    """Тесты RSA."""

    @pytest.mark.parametrize(
        "params",
        [
            "PKCS1v15(SHA-256)",
            "EMSA3(SHA-384)",
            "PSS(SHA-256)",
            "EMSA4(SHA-256,MGF1,32)",
            "PSSR(SHA-512,MGF1,0)",
        ],
    )
    def test_sign_verify(self, rsa_key: rsa.RSAPrivateKey, params: str) -> None:
        """Тест: подпись и проверка по legacy-строке."""
        sig = signer_from_legacy(rsa_key, params).sign(MESSAGE)

        assert len(sig) == 256
        verifier = verifier_from_legacy(rsa_key.public_key(), params)
        assert verifier.verify(MESSAGE, sig) is True
        assert verifier.verify(b"tampered", sig) is False

    def test_pkcs1v15_deterministic_output(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: PKCS1v15 не рандомизирована."""
        signer = signer_from_legacy(rsa_key, "PKCS1v15(SHA-256)")

        assert signer.sign(MESSAGE) == signer.sign(MESSAGE)

    def test_pkcs1v15_raw_prehash(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: PKCS1v15(Raw,SHA-256) подписывает готовый хеш."""
        digest = hashlib.sha256(MESSAGE).digest()
        sig = signer_from_legacy(rsa_key, "PKCS1v15(Raw,SHA-256)").sign(digest)

        # same signature as hashing the message inside the backend
        expected = signer_from_legacy(rsa_key, "PKCS1v15(SHA-256)").sign(MESSAGE)
        assert sig == expected

    def test_pss_raw(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: PSS_Raw подписывает готовый хеш."""
        digest = hashlib.sha256(MESSAGE).digest()
        sig = signer_from_legacy(rsa_key, "PSSR_Raw(SHA-256)").sign(digest)

        assert verifier_from_legacy(rsa_key.public_key(), "PSS(SHA-256)").verify(
            MESSAGE, sig
        )

    def test_pss_raw_wrong_digest_length(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: ошибка библиотеки оборачивается в SigningFailedError."""
        signer = signer_from_legacy(rsa_key, "PSS_Raw(SHA-256)")

        with pytest.raises(SigningFailedError) as exc_info:
            signer.sign(b"short")

        assert exc_info.value.__cause__ is not None

    def test_padding_required(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: RSA без padding."""
        with pytest.raises(InvalidArgumentError, match="padding"):
            create_signer(rsa_key, SignatureOptions("SHA-256"))

    @pytest.mark.parametrize("params", ["X9.31(SHA-256)", "ISO_9796_DS3(SHA-256)", "Raw"])
    def test_padding_not_available(self, rsa_key: rsa.RSAPrivateKey, params: str) -> None:
        """Тест: распознанные, но не реализованные padding."""
        with pytest.raises(AlgorithmLookupError):
            signer_from_legacy(rsa_key, params)

    def test_raw_hash_without_prehash(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: PKCS1v15(Raw) без prehash."""
        with pytest.raises(AlgorithmLookupError):
            signer_from_legacy(rsa_key, "EMSA3(Raw)")

    def test_der_rejected(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: RSA не поддерживает DER."""
        options = (
            SignatureOptions("SHA-256")
            .with_padding("PSS")
            .with_der_encoded_signature()
        )

        with pytest.raises(InvalidArgumentError, match="DER"):
            create_signer(rsa_key, options)


# ==============================================================================
# COMMON
# ==============================================================================


class TestCommon:
    """Общие проверки Signer/Verifier."""

    def test_provider_not_found(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: провайдер не поддерживается."""
        with pytest.raises(ProviderNotFoundError) as exc_info:
            signer_from_legacy(ec_key, "SHA-256", provider="pkcs11")

        assert exc_info.value.provider == "pkcs11"

    def test_base_provider_accepted(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: "base" провайдер равнозначен отсутствию провайдера."""
        signer = signer_from_legacy(ec_key, "SHA-256", provider="base")

        assert signer.options.provider is None

    def test_message_type(self, ec_key: ec.EllipticCurvePrivateKey) -> None:
        """Тест: сообщение должно быть bytes."""
        signer = create_signer(ec_key, SignatureOptions("SHA-256"))
        verifier = create_verifier(ec_key.public_key(), SignatureOptions("SHA-256"))

        with pytest.raises(TypeError):
            signer.sign("text")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            verifier.verify(MESSAGE, "sig")  # type: ignore[arg-type]

    def test_algorithm_name(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Тест: атрибуты signer."""
        signer = signer_from_legacy(rsa_key, "EMSA4(SHA-256)")

        assert signer.algorithm_name == "RSA"
        assert signer.options.padding == "PSS"
