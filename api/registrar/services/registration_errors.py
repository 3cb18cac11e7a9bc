"""Error taxonomy for the registration pipeline.

Each collaborator raises its own exception type. The orchestrator wraps them in
``RegistrationError`` whose ``kind`` says which pipeline stage failed; the
original exception stays on ``cause`` (and ``__cause__``) for logging.
"""

from __future__ import annotations

from enum import Enum


class RegistrationErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    IDENTIFICATION = "identification"
    SIGNATURE = "signature"
    REGISTRY = "registry"


class AuthenticationError(RuntimeError):
    """The authorization code could not be exchanged for an access token."""


class IdentificationError(RuntimeError):
    """The access token did not resolve to a user id."""


class SignatureErrorReason(str, Enum):
    INVALID_SIGNATURE = "invalid_signature"
    ACCOUNT_NOT_FOUND = "account_not_found"
    HASH_MISMATCH = "hash_mismatch"
    TRANSPORT = "transport"


class SignatureError(RuntimeError):
    def __init__(self, reason: SignatureErrorReason, message: str):
        super().__init__(f"{reason.value}: {message}")
        self.reason = reason


class RegistryError(RuntimeError):
    """The registry transaction could not be submitted."""


class StarknetRpcError(RuntimeError):
    def __init__(self, code: int | str, message: str):
        super().__init__(f"starknet_rpc_error:{code}:{message}")
        self.code = code
        self.rpc_message = message


class RegistrationError(Exception):
    def __init__(self, kind: RegistrationErrorKind, cause: BaseException):
        super().__init__(f"{kind.value}: {cause}")
        self.kind = kind
        self.cause = cause
