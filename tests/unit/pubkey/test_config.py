"""
Unit-тесты для config.py, metadata.py и загрузки конфигурации пакета.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src import get_logger, load_config
from src.pubkey.config import (
    DEFAULT_PARSER_CONFIG,
    RSA_PADDING_ALIASES,
    LegacyParserConfig,
)
from src.pubkey.metadata import (
    AlgorithmFamily,
    AlgorithmIdentity,
    SignatureFormat,
    family_for,
)


# ==============================================================================
# PARSER CONFIG
# ==============================================================================


class TestLegacyParserConfig:
    """Тесты LegacyParserConfig."""

    def test_defaults(self) -> None:
        """Тест: значения по умолчанию."""
        config = LegacyParserConfig()

        assert config.sm2_default_hash == "SM3"
        assert config.is_post_quantum("ML-DSA-87")
        assert config.is_post_quantum("SPHINCS+")
        assert not config.is_post_quantum("SPHINCS+-SHA2")
        assert not config.is_post_quantum("RSA")

    def test_canonical_padding(self) -> None:
        """Тест: приведение псевдонимов padding."""
        assert DEFAULT_PARSER_CONFIG.canonical_padding("EMSA4") == "PSS"
        assert DEFAULT_PARSER_CONFIG.canonical_padding("OAEP") == "OAEP"

    def test_alias_table_readonly(self) -> None:
        """Тест: встроенная таблица псевдонимов неизменяема."""
        with pytest.raises(TypeError):
            RSA_PADDING_ALIASES["EMSA5"] = "PSS"  # type: ignore[index]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sm2_default_hash": ""},
            {"pq_prefixes": ("",)},
            {"padding_aliases": {"": "PSS"}},
        ],
    )
    def test_invalid(self, kwargs: dict) -> None:
        """Тест: некорректные параметры отклоняются."""
        with pytest.raises(ValueError):
            LegacyParserConfig(**kwargs)

    def test_from_mapping_empty(self) -> None:
        """Тест: пустое отображение — конфигурация по умолчанию."""
        assert LegacyParserConfig.from_mapping(None) is DEFAULT_PARSER_CONFIG
        assert LegacyParserConfig.from_mapping({"log_level": "DEBUG"}) is DEFAULT_PARSER_CONFIG

    def test_from_mapping_overrides(self) -> None:
        """Тест: переопределение значений из загруженной конфигурации."""
        config = LegacyParserConfig.from_mapping(
            {
                "sm2_default_hash": "SHA-256",
                "pq_prefixes": ["HSS-LMS"],
                "padding_aliases": {"RSASSA-PSS": "PSS"},
            }
        )

        assert config.sm2_default_hash == "SHA-256"
        assert config.is_post_quantum("HSS-LMS")
        assert not config.is_post_quantum("Dilithium3")
        assert config.canonical_padding("RSASSA-PSS") == "PSS"
        assert config.canonical_padding("EMSA4") == "PSS"

    @pytest.mark.parametrize(
        "mapping",
        [
            {"pq_prefixes": "Dilithium"},
            {"pq_names": [1, 2]},
            {"sm2_default_hash": 3},
            {"padding_aliases": ["EMSA4"]},
        ],
    )
    def test_from_mapping_invalid(self, mapping: dict) -> None:
        """Тест: неверные типы значений."""
        with pytest.raises(ValueError):
            LegacyParserConfig.from_mapping(mapping)


# ==============================================================================
# METADATA
# ==============================================================================


class TestMetadata:
    """Тесты AlgorithmFamily, SignatureFormat, AlgorithmIdentity."""

    @pytest.mark.parametrize(
        "name,family",
        [
            ("RSA", AlgorithmFamily.RSA),
            ("SM2", AlgorithmFamily.SM2),
            ("Ed25519", AlgorithmFamily.ED25519),
            ("Ed448", AlgorithmFamily.ED448),
            ("ECDSA", AlgorithmFamily.DSA_FAMILY),
            ("ECKCDSA", AlgorithmFamily.DSA_FAMILY),
            ("Dilithium5", AlgorithmFamily.POST_QUANTUM),
            ("SLH-DSA", AlgorithmFamily.POST_QUANTUM),
            ("rsa", AlgorithmFamily.DSA_FAMILY),
        ],
    )
    def test_family_for(self, name: str, family: AlgorithmFamily) -> None:
        """Тест: сопоставление имени семейству (с учётом регистра)."""
        assert family_for(name) is family

    def test_family_label(self) -> None:
        """Тест: человекочитаемые названия определены для всех семейств."""
        assert all(family.label() for family in AlgorithmFamily)
        assert AlgorithmFamily.DSA_FAMILY.label() == "DSA/ECDSA"

    def test_signature_format_from_str(self) -> None:
        """Тест: парсинг формата подписи."""
        assert SignatureFormat.from_str("der_sequence") is SignatureFormat.DER_SEQUENCE
        with pytest.raises(ValueError):
            SignatureFormat.from_str("ber")

    def test_identity(self) -> None:
        """Тест: AlgorithmIdentity."""
        identity = AlgorithmIdentity("ECDSA")

        assert identity.signature_format is SignatureFormat.STANDARD
        assert identity.family() is AlgorithmFamily.DSA_FAMILY

    @pytest.mark.parametrize("name", ["", "   "])
    def test_identity_empty_name(self, name: str) -> None:
        """Тест: пустое имя алгоритма отклоняется."""
        with pytest.raises(ValueError):
            AlgorithmIdentity(name)


# ==============================================================================
# PACKAGE CONFIG / LOGGING
# ==============================================================================


class TestLoadConfig:
    """Тесты load_config() и get_logger()."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Тест: отсутствующий файл — конфигурация по умолчанию."""
        config = load_config(tmp_path / "missing.json")

        assert config == {"log_level": "INFO"}

    def test_loads_file(self, tmp_path: Path) -> None:
        """Тест: значения файла переопределяют значения по умолчанию."""
        path = tmp_path / "pubkey.json"
        path.write_text(json.dumps({"sm2_default_hash": "SHA-256"}), encoding="utf-8")

        config = load_config(path)

        assert config["sm2_default_hash"] == "SHA-256"
        assert config["log_level"] == "INFO"
        assert LegacyParserConfig.from_mapping(config).sm2_default_hash == "SHA-256"

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Тест: недопустимый JSON — конфигурация по умолчанию."""
        path = tmp_path / "pubkey.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_config(path) == {"log_level": "INFO"}

    def test_non_object(self, tmp_path: Path) -> None:
        """Тест: JSON не-объект — конфигурация по умолчанию."""
        path = tmp_path / "pubkey.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert load_config(path) == {"log_level": "INFO"}

    def test_env_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Тест: путь из переменной окружения PUBKEY_CONFIG."""
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"log_level": "DEBUG"}), encoding="utf-8")
        monkeypatch.setenv("PUBKEY_CONFIG", str(path))

        assert load_config()["log_level"] == "DEBUG"

    @pytest.mark.parametrize(
        "module_name,expected",
        [
            ("plugins.hsm", "src.pubkey.plugins.hsm"),
            ("src.pubkey.legacy", "src.pubkey.legacy"),
            ("__main__", "src.pubkey.main"),
        ],
    )
    def test_get_logger(self, module_name: str, expected: str) -> None:
        """Тест: логгеры в пространстве имён пакета."""
        assert get_logger(module_name).name == expected
