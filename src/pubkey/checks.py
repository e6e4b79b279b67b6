# -*- coding: utf-8 -*-
"""
RU: Общие проверки SignatureOptions для алгоритмов, которые принимают
не более одного (опционального) хеша и ничего больше.
EN: Generic SignatureOptions checks for algorithms that accept at most one
optional hash and nothing else (pure EdDSA, SM2, hash-based schemes).

RSA and other padding-capable families perform their own, richer checks.
"""
from __future__ import annotations

from typing import Optional

from src.pubkey.exceptions import InvalidArgumentError
from src.pubkey.options import SignatureOptions, check_hash_choice


def validate_for_hash_based_signature(
    options: SignatureOptions,
    algo_name: str,
    hash_fn: Optional[str] = None,
) -> None:
    """
    Reject options that a hash-based signature algorithm cannot honor.

    Args:
        options: Options received by the signer/verifier.
        algo_name: Algorithm name used in error messages.
        hash_fn: The only hash the algorithm accepts, or None if it does
            not use an explicitly chosen hash at all.

    Raises:
        InvalidArgumentError: if the hash is not acceptable, or padding or
            prehashing was requested.
    """
    check_hash_choice(options.hash_function, algo_name, hash_fn)

    if options.using_padding():
        raise InvalidArgumentError(
            f"{algo_name} does not support padding modes", algorithm=algo_name
        )

    if options.using_prehash():
        raise InvalidArgumentError(
            f"{algo_name} does not support prehashing", algorithm=algo_name
        )


__all__ = ["validate_for_hash_based_signature"]
