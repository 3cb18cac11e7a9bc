"""Pydantic models."""

from registrar.models.error import Problem
from registrar.models.registration import (
    FieldElement,
    GithubUserRegistrationRequest,
    GithubUserRegistrationResponse,
    NonceStrategy,
    Signature,
    SignedData,
    TransactionStatusResponse,
)

__all__ = [
    "FieldElement",
    "GithubUserRegistrationRequest",
    "GithubUserRegistrationResponse",
    "NonceStrategy",
    "Problem",
    "Signature",
    "SignedData",
    "TransactionStatusResponse",
]
