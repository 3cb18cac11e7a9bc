"""Registration request/response models.

Starknet field elements travel as hex strings (the ``0x`` prefix is optional,
so ``"10"`` is sixteen) and are held as plain ``int`` values once validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, WithJsonSchema

STARK_PRIME = 2**251 + 17 * 2**192 + 1


def parse_field_element(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("invalid field element: boolean")
    if isinstance(value, int):
        felt = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw[:2].lower() == "0x":
            raw = raw[2:]
        try:
            felt = int(raw, 16)
        except ValueError as exc:
            raise ValueError(f"invalid hexadecimal felt string: {value!r}") from exc
    else:
        raise ValueError(f"invalid field element type: {type(value).__name__}")
    if felt < 0 or felt >= STARK_PRIME:
        raise ValueError("field element out of range")
    return felt


def felt_to_hex(value: int) -> str:
    return hex(value)


FieldElement = Annotated[
    int,
    BeforeValidator(parse_field_element),
    PlainSerializer(felt_to_hex, return_type=str),
    WithJsonSchema({"type": "string", "pattern": "^0x[0-9a-fA-F]+$", "examples": ["0x666"]}),
]


class Signature(BaseModel):
    """Stark ECDSA signature."""

    model_config = ConfigDict(frozen=True, extra="forbid")
    r: FieldElement
    s: FieldElement


class SignedData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    hash: FieldElement
    signature: Signature


class GithubUserRegistrationRequest(BaseModel):
    """POST /api/registrations/github body."""

    model_config = ConfigDict(extra="forbid")
    authorization_code: Annotated[str, Field(min_length=1, description="Single-use GitHub OAuth code")]
    account_address: Annotated[FieldElement, Field(description="Starknet account being registered")]
    signed_data: SignedData


class GithubUserRegistrationResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    transaction_hash: FieldElement


class TransactionStatusResponse(BaseModel):
    """GET /api/registrations/transactions/{transaction_hash} response."""

    model_config = ConfigDict(extra="forbid")
    transaction_hash: FieldElement
    finality_status: Annotated[str, Field(description="RECEIVED, ACCEPTED_ON_L2, ACCEPTED_ON_L1 or REJECTED")]
    execution_status: Annotated[str | None, Field(description="SUCCEEDED or REVERTED once executed")] = None


class NonceStrategy(str, Enum):
    SEQUENTIAL = "sequential"
    TIMESTAMP = "timestamp"
    LEDGER = "ledger"
