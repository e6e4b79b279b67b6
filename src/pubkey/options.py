"""
Параметры генерации и проверки цифровой подписи.

SignatureOptions — значение с полями "устанавливается один раз":
хеш, padding, prehash, контекст, провайдер, DER-кодирование,
детерминированность, размер соли и explicit trailer (ISO 9796-2).

Каждый with_X() возвращает НОВОЕ значение (copy-on-write), отличающееся
от исходного только полем X. Повторная установка поля — ошибка
использования API (OptionAlreadySetError), а не ошибка входных данных:
молчаливая перезапись могла бы скрыть баг вызывающего кода, который
объединяет два независимых источника конфигурации.

Example:
    >>> from src.pubkey.options import SignatureOptions
    >>> options = (
    ...     SignatureOptions("SHA-256")
    ...     .with_padding("PSS")
    ...     .with_salt_size(32)
    ... )
    >>> options.padding_with_hash()
    'PSS(SHA-256)'
    >>> options.using_salt_size()
    True

Thread Safety:
    with_X() не изменяет получателя, поэтому независимые цепочки
    безопасны. Единственная мутирующая операция —
    take_and_validate_hash(), она предназначена для back end, которому
    значение передано во владение.

Version: 1.0
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional, Union

from src.pubkey.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    OptionAlreadySetError,
)

logger = logging.getLogger(__name__)

__all__: list[str] = [
    "SignatureOptions",
    "ContextInput",
    "BASE_PROVIDER",
    "check_hash_choice",
]

ContextInput = Union[bytes, bytearray, memoryview, str]

# Провайдер "base" эквивалентен отсутствию провайдера
BASE_PROVIDER = "base"


# ==============================================================================
# HELPERS
# ==============================================================================


def check_hash_choice(
    requested: Optional[str],
    algo_name: str,
    acceptable_hash: Optional[str],
) -> None:
    """
    Проверить выбранный хеш против единственного допустимого хеша алгоритма.

    Args:
        requested: Запрошенный хеш (None — не задан)
        algo_name: Имя алгоритма для сообщений об ошибке
        acceptable_hash: Единственный допустимый хеш; None — алгоритм
            вообще не принимает явный выбор хеша

    Raises:
        InvalidArgumentError: Хеш задан, но не допустим
    """
    if requested is None:
        return

    if acceptable_hash is None:
        raise InvalidArgumentError(
            f"This {algo_name} key does not support explicit hash function choice",
            algorithm=algo_name,
        )

    if requested != acceptable_hash:
        raise InvalidArgumentError(
            f"This {algo_name} key can only be used with {acceptable_hash}, "
            f"not {requested}",
            algorithm=algo_name,
            context={"requested": requested, "accepted": acceptable_hash},
        )


def _require_name(option: str, value: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{option} must be str, got {type(value).__name__}")
    if not value:
        raise InvalidArgumentError(f"SignatureOptions {option} cannot be empty")
    return value


# ==============================================================================
# MAIN CLASS: SIGNATURE OPTIONS
# ==============================================================================


class SignatureOptions:
    """
    Параметры подписи с полями "устанавливается один раз".

    Все опциональные поля изначально не заданы (None / False).
    Отсутствие значения всегда представлено None; пустая строка
    никогда не используется как маркер.

    Attributes (read-only):
        hash_function: Хеш для дайджеста сообщения
        padding: Схема padding (в основном RSA)
        prehash_function: Явный хеш для prehash (None при
            using_prehash() == True означает хеш алгоритма по умолчанию)
        context: Контекст/домен (для SM2 — user ID)
        provider: Предпочитаемая реализация
        salt_size: Размер соли (PSS, ISO 9796-2)

    Example:
        >>> opts = SignatureOptions().with_prehash()
        >>> opts.using_prehash(), opts.prehash_function
        (True, None)
        >>> opts.with_prehash("SHA-512")
        OptionAlreadySetError: SignatureOptions.with_prehash cannot specify prehash twice
    """

    __slots__ = (
        "_hash_function",
        "_padding",
        "_using_prehash",
        "_prehash_function",
        "_context",
        "_provider",
        "_der_encoded",
        "_deterministic",
        "_salt_size",
        "_explicit_trailer_field",
    )

    def __init__(self, hash_function: Optional[str] = None) -> None:
        """
        Создать пустые параметры или параметры с заданным хешем.

        Args:
            hash_function: Сокращение для SignatureOptions().with_hash(...)

        Raises:
            InvalidArgumentError: hash_function — пустая строка
        """
        self._hash_function: Optional[str] = None
        self._padding: Optional[str] = None
        self._using_prehash = False
        self._prehash_function: Optional[str] = None
        self._context: Optional[bytes] = None
        self._provider: Optional[str] = None
        self._der_encoded = False
        self._deterministic = False
        self._salt_size: Optional[int] = None
        self._explicit_trailer_field = False

        if hash_function is not None:
            self._hash_function = _require_name("hash", hash_function)

    def _derive(self, **changes: Any) -> SignatureOptions:
        derived = copy.copy(self)
        for name, value in changes.items():
            setattr(derived, f"_{name}", value)
        return derived

    # --------------------------------------------------------------------------
    # Fluent setters
    # --------------------------------------------------------------------------

    def with_hash(self, hash_function: str) -> SignatureOptions:
        """Задать хеш для дайджеста сообщения."""
        if self.using_hash():
            raise OptionAlreadySetError("hash")
        return self._derive(hash_function=_require_name("hash", hash_function))

    def with_padding(self, padding: str) -> SignatureOptions:
        """
        Задать схему padding.

        Используется в основном RSA. Алгоритмы без поддержки padding
        отклоняют такие параметры при создании signer/verifier.
        """
        if self.using_padding():
            raise OptionAlreadySetError("padding")
        return self._derive(padding=_require_name("padding", padding))

    def with_prehash(self, prehash_function: Optional[str] = None) -> SignatureOptions:
        """
        Запросить prehash вариант схемы.

        Args:
            prehash_function: Явный хеш для prehash; None — хеш по
                умолчанию для алгоритма (например, SHA-512 для Ed25519ph)
        """
        if self.using_prehash():
            raise OptionAlreadySetError("prehash")
        if prehash_function is not None:
            _require_name("prehash", prehash_function)
        return self._derive(using_prehash=True, prehash_function=prehash_function)

    def with_context(self, context: ContextInput) -> SignatureOptions:
        """
        Задать контекст подписи.

        Строка кодируется в UTF-8. Для SM2 контекст — идентификатор
        пользователя.
        """
        if self.using_context():
            raise OptionAlreadySetError("context")
        if isinstance(context, str):
            data = context.encode("utf-8")
        elif isinstance(context, (bytes, bytearray, memoryview)):
            data = bytes(context)
        else:
            raise TypeError(
                f"context must be bytes or str, got {type(context).__name__}"
            )
        return self._derive(context=data)

    def with_provider(self, provider: Optional[str]) -> SignatureOptions:
        """
        Задать предпочитаемую реализацию.

        Пустая строка, None и "base" не задают провайдер и не занимают
        слот: последующий with_provider("oqs") будет успешным.
        """
        if not provider or provider == BASE_PROVIDER:
            return self
        if self.using_provider():
            raise OptionAlreadySetError("provider")
        return self._derive(provider=provider)

    def with_der_encoded_signature(self) -> SignatureOptions:
        """Создавать/ожидать подпись в DER SEQUENCE (в основном ECDSA)."""
        if self._der_encoded:
            raise OptionAlreadySetError("der_encoded_signature")
        return self._derive(der_encoded=True)

    def with_deterministic_signature(self) -> SignatureOptions:
        """
        Запросить детерминированную подпись.

        Не влияет на схемы, которые всегда детерминированы или всегда
        рандомизированы. Игнорируется при проверке подписи.
        """
        if self._deterministic:
            raise OptionAlreadySetError("deterministic_signature")
        return self._derive(deterministic=True)

    def with_salt_size(self, salt_size: int) -> SignatureOptions:
        """Задать размер соли в байтах (PSS, ISO 9796-2)."""
        if self.using_salt_size():
            raise OptionAlreadySetError("salt_size")
        if isinstance(salt_size, bool) or not isinstance(salt_size, int):
            raise TypeError(f"salt_size must be int, got {type(salt_size).__name__}")
        if salt_size < 0:
            raise InvalidArgumentError(
                f"Salt size must be non-negative, got {salt_size}"
            )
        return self._derive(salt_size=salt_size)

    def with_explicit_trailer_field(self) -> SignatureOptions:
        """Использовать explicit trailer field (только ISO 9796-2)."""
        if self._explicit_trailer_field:
            raise OptionAlreadySetError("explicit_trailer_field")
        return self._derive(explicit_trailer_field=True)

    # --------------------------------------------------------------------------
    # Accessors
    # --------------------------------------------------------------------------

    @property
    def hash_function(self) -> Optional[str]:
        return self._hash_function

    @property
    def padding(self) -> Optional[str]:
        return self._padding

    @property
    def prehash_function(self) -> Optional[str]:
        return self._prehash_function

    @property
    def context(self) -> Optional[bytes]:
        return self._context

    @property
    def provider(self) -> Optional[str]:
        return self._provider

    @property
    def salt_size(self) -> Optional[int]:
        return self._salt_size

    def hash_function_name(self) -> str:
        """
        Имя хеша для схем, которые его требуют.

        Raises:
            InvalidStateError: Хеш не задан
        """
        if self._hash_function is None:
            raise InvalidStateError(
                "This signature scheme requires specifying a hash function"
            )
        return self._hash_function

    # --------------------------------------------------------------------------
    # Predicates
    # --------------------------------------------------------------------------

    def using_hash(self) -> bool:
        return self._hash_function is not None

    def using_padding(self) -> bool:
        return self._padding is not None

    def using_prehash(self) -> bool:
        return self._using_prehash

    def using_context(self) -> bool:
        return self._context is not None

    def using_provider(self) -> bool:
        return self._provider is not None

    def using_der_encoded_signature(self) -> bool:
        return self._der_encoded

    def using_deterministic_signature(self) -> bool:
        return self._deterministic

    def using_salt_size(self) -> bool:
        return self._salt_size is not None

    def using_explicit_trailer_field(self) -> bool:
        return self._explicit_trailer_field

    # --------------------------------------------------------------------------
    # Derived operations
    # --------------------------------------------------------------------------

    def padding_with_hash(self) -> str:
        """
        Padding вместе с хешем в текстовом формате RSA.

        Returns:
            "PSS(SHA-256)" для padding+hash, padding если задан только он,
            хеш если задан только он

        Raises:
            InvalidArgumentError: Не задан ни padding, ни хеш
        """
        if self._padding is not None and self._hash_function is not None:
            return f"{self._padding}({self._hash_function})"
        if self._padding is not None:
            return self._padding
        if self._hash_function is not None:
            return self._hash_function
        raise InvalidArgumentError("RSA signature requires a padding scheme")

    def take_and_validate_hash(
        self,
        algo_name: str,
        acceptable_hash: Optional[str] = None,
    ) -> None:
        """
        Извлечь (очистить) хеш и проверить его допустимость.

        Args:
            algo_name: Имя алгоритма для сообщений об ошибке
            acceptable_hash: Единственный хеш, который принимает алгоритм;
                None — алгоритм не принимает явный выбор хеша

        Raises:
            InvalidArgumentError: Хеш задан, но алгоритм его не принимает

        Note:
            Мутирует получателя. Повторный вызов видит хеш уже очищенным
            и завершается успешно.
        """
        requested = self._hash_function
        self._hash_function = None
        check_hash_choice(requested, algo_name, acceptable_hash)
        if requested is not None:
            logger.debug("Consumed hash %s for %s", requested, algo_name)

    def to_dict(self) -> Dict[str, Any]:
        """
        Снимок параметров для логов и диагностики.

        Returns:
            Словарь; контекст представлен в hex
        """
        return {
            "hash_function": self._hash_function,
            "padding": self._padding,
            "using_prehash": self._using_prehash,
            "prehash_function": self._prehash_function,
            "context": self._context.hex() if self._context is not None else None,
            "provider": self._provider,
            "der_encoded": self._der_encoded,
            "deterministic": self._deterministic,
            "salt_size": self._salt_size,
            "explicit_trailer_field": self._explicit_trailer_field,
        }

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{k}={v!r}"
            for k, v in self.to_dict().items()
            if v is not None and v is not False
        )
        return f"SignatureOptions({fields})"
