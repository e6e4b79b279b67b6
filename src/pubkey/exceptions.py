"""
Исключения подсистемы параметров подписи.

Иерархия типизированных исключений для построения SignatureOptions,
разбора legacy-строк параметров и проверки опций на стороне
алгоритмов подписи. Различает ошибку использования API (повторная
установка поля), ошибку аргумента (некорректный ввод), ошибку поиска
(неподдерживаемая форма параметров) и ошибку состояния (обязательное
поле не задано).

Example:
    >>> from src.pubkey.exceptions import SignatureOptionsError
    >>> try:
    ...     options = parse_legacy_options("RSA", "PSS(SHA-256,XYZ)")
    ... except SignatureOptionsError as e:
    ...     logger.error(f"Options rejected: {e}")
    ...     print(f"Algorithm: {e.algorithm}")

Иерархия:
    SignatureOptionsError (базовое)
    ├── OptionAlreadySetError      (usage error)
    ├── InvalidArgumentError       (argument error, также ValueError)
    ├── AlgorithmLookupError       (lookup error, также LookupError)
    │   └── ProviderNotFoundError
    ├── InvalidStateError          (state error)
    └── SigningFailedError

Security Note:
    Исключения НЕ содержат ключей, подписей или подписываемых данных.
    Контекст (например SM2 user ID) в сообщения не попадает.

Version: 1.0
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__: list[str] = [
    "SignatureOptionsError",
    "OptionAlreadySetError",
    "InvalidArgumentError",
    "AlgorithmLookupError",
    "ProviderNotFoundError",
    "InvalidStateError",
    "SigningFailedError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class SignatureOptionsError(Exception):
    """
    Базовое исключение подсистемы параметров подписи.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Имя алгоритма, к которому относится ошибка (опционально)
        context: Дополнительный контекст для отладки (опционально)

    Example:
        >>> str(SignatureOptionsError("Bad options", algorithm="RSA"))
        'SignatureOptionsError: Bad options [algorithm=RSA]'
    """

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# USAGE ERRORS
# ==============================================================================


class OptionAlreadySetError(SignatureOptionsError):
    """
    Повторная установка поля SignatureOptions.

    Ошибка программиста, а не входных данных: два независимых источника
    конфигурации пытаются задать одно и то же измерение (например, два
    разных хеша). Никогда не должна перехватываться для повтора.

    Attributes:
        option: Имя поля ("hash", "padding", ...)

    Example:
        >>> SignatureOptions("SHA-256").with_hash("SHA-512")
        OptionAlreadySetError: SignatureOptions.with_hash cannot specify hash twice (option=hash)
    """

    def __init__(self, option: str) -> None:
        super().__init__(
            f"SignatureOptions.with_{option} cannot specify {option} twice",
            context={"option": option},
        )
        self.option = option


# ==============================================================================
# ARGUMENT / LOOKUP / STATE ERRORS
# ==============================================================================


class InvalidArgumentError(SignatureOptionsError, ValueError):
    """
    Некорректный или противоречивый аргумент.

    Raises когда:
    - Legacy-строка параметров имеет неверный формат
    - Неверное количество параметров для семейства алгоритмов
    - Алгоритм не поддерживает переданную опцию (padding, prehash, ...)

    Example:
        >>> parse_legacy_options("Dilithium3", "Other")
        InvalidArgumentError: Unexpected parameters for signing with Dilithium3 [algorithm=Dilithium3]
    """

    pass


class AlgorithmLookupError(SignatureOptionsError, LookupError):
    """
    Распознанное семейство padding с неподдерживаемой формой параметров.

    Отделена от InvalidArgumentError, чтобы инструменты могли сообщать
    "эта комбинация не реализована" отдельно от "ввод бессмыслен".

    Example:
        >>> parse_legacy_options("RSA", "X9.31(SHA-256,extra)")
        AlgorithmLookupError: X9.31 padding parameters not supported [algorithm=RSA]
    """

    pass


class ProviderNotFoundError(AlgorithmLookupError):
    """
    Запрошенный провайдер реализации недоступен.

    Attributes:
        provider: Имя провайдера
    """

    def __init__(self, algorithm: str, provider: str) -> None:
        super().__init__(
            f"Could not find provider '{provider}'",
            algorithm=algorithm,
            context={"provider": provider},
        )
        self.provider = provider


class InvalidStateError(SignatureOptionsError):
    """
    Запрос обязательного, но не заданного поля.

    Example:
        >>> SignatureOptions().hash_function_name()
        InvalidStateError: This signature scheme requires specifying a hash function
    """

    pass


# ==============================================================================
# BACKEND ERRORS
# ==============================================================================


class SigningFailedError(SignatureOptionsError):
    """
    Неудачная генерация подписи в back end.

    Оборачивает исключение библиотеки (cryptography) через ``from exc``.
    """

    pass
