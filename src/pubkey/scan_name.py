# -*- coding: utf-8 -*-
"""
RU: Токенизатор спецификаций алгоритмов вида ``Name(arg1,arg2,...)``.
EN: Tokenizer for algorithm specification strings of the form
``Name(arg1,arg2,...)``.

Nested groups are kept verbatim as a single argument, so
``"PSS(SHA-256,MGF1(SHA-256),32)"`` yields the arguments
``["SHA-256", "MGF1(SHA-256)", "32"]``. No whitespace is stripped.
"""
from __future__ import annotations

from typing import Final, List, Optional, Tuple, overload

from src.pubkey.exceptions import InvalidArgumentError

_MAX_U32: Final[int] = 0xFFFFFFFF


def _tokenize(spec: str) -> Tuple[str, List[str]]:
    """
    Split ``spec`` into the algorithm name and its top-level arguments.

    Raises:
        InvalidArgumentError: on an empty name, unbalanced parentheses or
            trailing characters after the closing parenthesis.
    """
    open_at = spec.find("(")
    if open_at < 0:
        if ")" in spec or "," in spec:
            raise InvalidArgumentError(f"Bad algorithm spec '{spec}'")
        name = spec
        args: List[str] = []
    else:
        name = spec[:open_at]
        if not spec.endswith(")"):
            raise InvalidArgumentError(f"Bad algorithm spec '{spec}': missing ')'")

        args = []
        depth = 0
        current: List[str] = []
        for ch in spec[open_at + 1 : -1]:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth < 0:
                    raise InvalidArgumentError(
                        f"Bad algorithm spec '{spec}': unbalanced parentheses"
                    )
            elif ch == "," and depth == 0:
                args.append("".join(current))
                current = []
                continue
            current.append(ch)

        if depth != 0:
            raise InvalidArgumentError(
                f"Bad algorithm spec '{spec}': unbalanced parentheses"
            )
        args.append("".join(current))

        if any(not a for a in args):
            raise InvalidArgumentError(f"Bad algorithm spec '{spec}': empty argument")

    if not name:
        raise InvalidArgumentError(f"Bad algorithm spec '{spec}': empty name")

    return name, args


class ScanName:
    """
    Parsed algorithm specification.

    Attributes:
        algo_name: Name before the opening parenthesis.

    Examples:
        >>> req = ScanName("PSS(SHA-256,MGF1,32)")
        >>> req.algo_name, req.arg_count()
        ('PSS', 3)
        >>> req.arg_as_integer(2)
        32
        >>> req.arg(3, "none")
        'none'
    """

    __slots__ = ("_spec", "algo_name", "_args")

    def __init__(self, spec: str) -> None:
        if not isinstance(spec, str):
            raise TypeError(f"spec must be str, got {type(spec).__name__}")
        self._spec = spec
        self.algo_name, self._args = _tokenize(spec)

    def arg_count(self) -> int:
        return len(self._args)

    def arg_count_between(self, lower: int, upper: int) -> bool:
        """True if lower <= arg_count() <= upper."""
        return lower <= len(self._args) <= upper

    @overload
    def arg(self, i: int) -> str: ...

    @overload
    def arg(self, i: int, default: str) -> str: ...

    def arg(self, i: int, default: Optional[str] = None) -> str:
        """
        Return argument ``i``.

        Args:
            i: zero-based index.
            default: returned when ``i`` is beyond the supplied arguments.

        Raises:
            InvalidArgumentError: if ``i`` is out of range and no default
                was given.
        """
        if 0 <= i < len(self._args):
            return self._args[i]
        if default is not None:
            return default
        raise InvalidArgumentError(f"ScanName.arg {i} out of range for '{self._spec}'")

    def arg_as_integer(self, i: int, default: Optional[int] = None) -> int:
        """
        Return argument ``i`` parsed as an unsigned 32-bit decimal integer.

        Raises:
            InvalidArgumentError: if the argument is missing (and no default)
                or not a decimal integer.
        """
        if i >= len(self._args) and default is not None:
            return default

        value = self.arg(i)
        if not (value.isascii() and value.isdigit()):
            raise InvalidArgumentError(
                f"Expected integer argument {i} in '{self._spec}', got '{value}'"
            )
        result = int(value)
        if result > _MAX_U32:
            raise InvalidArgumentError(
                f"Integer argument {i} in '{self._spec}' out of range"
            )
        return result

    def to_string(self) -> str:
        return self._spec

    def __str__(self) -> str:
        return self._spec

    def __repr__(self) -> str:
        return f"ScanName({self._spec!r})"


__all__ = ["ScanName"]
