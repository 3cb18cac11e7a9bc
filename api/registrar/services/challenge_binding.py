"""Binding between the OAuth code and the signed hash.

The wallet signs ``pedersen_hash_on_elements([short_string(authorization_code)])``.
Requiring that hash ties the account signature to this OAuth session, so a
signature captured for another code cannot be replayed.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from registrar.models.registration import SignedData
from registrar.services.registration_errors import SignatureError, SignatureErrorReason

MAX_SHORT_STRING_LENGTH = 31


class ChallengeBinding(Protocol):
    def check(self, authorization_code: str, signed_data: SignedData) -> None:
        ...


def encode_short_string(text: str) -> int:
    if not text.isascii():
        raise ValueError("short string must be ascii")
    if len(text) > MAX_SHORT_STRING_LENGTH:
        raise ValueError(f"short string longer than {MAX_SHORT_STRING_LENGTH} characters")
    return int.from_bytes(text.encode("ascii"), "big")


class PedersenChallengeBinding:
    def __init__(self, hash_on_elements: Callable[[list[int]], int] | None = None):
        self._hash_on_elements = hash_on_elements

    def expected_hash(self, authorization_code: str) -> int:
        try:
            data = encode_short_string(authorization_code)
        except ValueError as exc:
            raise SignatureError(SignatureErrorReason.HASH_MISMATCH, str(exc)) from exc
        return self._hasher()([data])

    def check(self, authorization_code: str, signed_data: SignedData) -> None:
        expected = self.expected_hash(authorization_code)
        if signed_data.hash != expected:
            raise SignatureError(
                SignatureErrorReason.HASH_MISMATCH,
                f"wrong hash (expected {hex(expected)}, was {hex(signed_data.hash)})",
            )

    def _hasher(self) -> Callable[[list[int]], int]:
        if self._hash_on_elements is None:
            self._hash_on_elements = self._load_pedersen()
        return self._hash_on_elements

    def _load_pedersen(self) -> Any:
        try:
            from starknet_py.hash.utils import compute_hash_on_elements  # type: ignore
        except Exception as exc:  # pragma: no cover - import-time behavior
            raise RuntimeError("missing_dependency_starknet_py") from exc
        return compute_hash_on_elements
