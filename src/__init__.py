"""
Пакет pk-signature-options
==========================

Слой согласования параметров цифровой подписи между намерением
вызывающего кода ("подписать SHA-256, PSS, детерминированно, в DER") и
реализацией алгоритма, которая принимает только часть этих параметров.

Этот пакет предоставляет:
    - SignatureOptions — неизменяемые параметры с полями
      "устанавливается один раз"
    - Разбор legacy-строк параметров ("EMSA1(SHA-256)",
      "PSS(SHA-256,MGF1,32)", "Ed25519ph", "Deterministic")
    - Общую проверку опций для алгоритмов подписи
    - Signer/Verifier поверх библиотеки cryptography

Пример базового использования:
    >>> from src.pubkey import SignatureOptions, parse_legacy_options
    >>>
    >>> options = SignatureOptions("SHA-256").with_padding("PSS")
    >>> options.padding_with_hash()
    'PSS(SHA-256)'
    >>>
    >>> legacy = parse_legacy_options("RSA", "EMSA4(SHA-256,MGF1,32)")
    >>> legacy.salt_size
    32

Управление конфигурацией:
    >>> import os
    >>> os.environ['PUBKEY_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from src import load_config
    >>> from src.pubkey.config import LegacyParserConfig
    >>>
    >>> parser_config = LegacyParserConfig.from_mapping(load_config())

Версия: 1.0.0
Лицензия: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "1.0.0"
__description__ = "Signature options negotiation and legacy parameter parsing"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# =============================================================================
# ПРОВЕРКА ВЕРСИИ PYTHON
# =============================================================================

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"pk-signature-options требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

LOGGER_NAMESPACE = "src.pubkey"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _setup_logging() -> None:
    """
    Инициализировать логирование пакета.

    Настраивает логгер пространства имён src.pubkey:
    - Консольный обработчик (stderr) для WARNING и выше
    - Ротирующий файловый обработчик, если задана переменная
      окружения PUBKEY_LOG_FILE
    - Уровень из переменной окружения PUBKEY_LOG_LEVEL (INFO по умолчанию)

    Идемпотентна — повторные вызовы не имеют дополнительного эффекта.
    """
    log_level = _LOG_LEVELS.get(
        os.environ.get("PUBKEY_LOG_LEVEL", "INFO").upper(), logging.INFO
    )

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    if package_logger.handlers:
        return

    package_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    log_file = os.environ.get("PUBKEY_LOG_FILE")
    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер модуля в пространстве имён пакета.

    Аргументы:
        module_name: Обычно `__name__` вызывающего модуля.

    Возвращает:
        logging.Logger с именем 'src.pubkey.<module_name>' (имена,
        уже находящиеся в пространстве имён, не меняются).

    Пример:
        >>> logger = get_logger("plugins.hsm")
        >>> logger.name
        'src.pubkey.plugins.hsm'
    """
    if module_name.startswith(LOGGER_NAMESPACE):
        full_name = module_name
    elif module_name == "__main__":
        full_name = f"{LOGGER_NAMESPACE}.main"
    else:
        full_name = f"{LOGGER_NAMESPACE}.{module_name.lstrip('.')}"

    return logging.getLogger(full_name)


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из JSON-файла или использовать значения
    по умолчанию.

    Если файл не существует или содержит недопустимый JSON,
    возвращается конфигурация по умолчанию с предупреждением в лог.

    Ключи конфигурации:
        - log_level: str - Уровень логирования
        - pq_prefixes: list[str] - Префиксы имён постквантовых алгоритмов
        - pq_names: list[str] - Точные имена постквантовых алгоритмов
        - sm2_default_hash: str - Хеш SM2 по умолчанию
        - padding_aliases: dict[str, str] - Дополнительные псевдонимы padding

    Аргументы:
        config_path: Путь к файлу. Если None — переменная окружения
                    PUBKEY_CONFIG, иначе 'pubkey.json' в текущем каталоге.

    Возвращает:
        Словарь с ключами по умолчанию, переопределёнными значениями
        из файла.

    Пример:
        >>> config = load_config(Path("deploy/pubkey.json"))
        >>> config.get("sm2_default_hash", "SM3")
        'SM3'
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path(os.environ.get("PUBKEY_CONFIG", "pubkey.json"))

    config = _DEFAULT_CONFIG.copy()

    if not config_path.exists():
        logger.info(
            f"Файл конфигурации {config_path} не найден. "
            f"Используется конфигурация по умолчанию."
        )
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)

        if not isinstance(user_config, dict):
            raise ValueError(
                f"Файл конфигурации должен содержать JSON-объект, "
                f"получен {type(user_config).__name__}"
            )

        config.update(user_config)
        logger.info(f"Конфигурация загружена из {config_path}")

    except json.JSONDecodeError as e:
        logger.warning(
            f"Не удалось разобрать {config_path}: Недопустимый JSON "
            f"в строке {e.lineno}, столбце {e.colno}. "
            f"Используется конфигурация по умолчанию."
        )
    except OSError as e:
        logger.warning(
            f"Не удалось прочитать {config_path}: {e}. "
            f"Используется конфигурация по умолчанию."
        )
    except ValueError as e:
        logger.warning(
            f"Недопустимый формат конфигурации: {e}. "
            f"Используется конфигурация по умолчанию."
        )

    return config


_setup_logging()

__all__ = [
    "__version__",
    "LOGGER_NAMESPACE",
    "get_logger",
    "load_config",
]
