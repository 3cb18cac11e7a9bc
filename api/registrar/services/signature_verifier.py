from __future__ import annotations

import logging
from typing import Protocol

import httpx

from registrar.models.registration import SignedData
from registrar.services.registration_errors import SignatureError, SignatureErrorReason, StarknetRpcError
from registrar.services.starknet_rpc import CONTRACT_ERROR, CONTRACT_NOT_FOUND, StarknetRpcClient

logger = logging.getLogger(__name__)

# starknet_keccak("is_valid_signature")
IS_VALID_SIGNATURE_SELECTOR = 0x28420862938116CB3BBDBEDEE07451CCC54D4E9412DBEF71142AD1980A30941
VALID = int.from_bytes(b"VALID", "big")


class SignatureVerifier(Protocol):
    async def verify(self, account_address: int, signed_data: SignedData) -> None:
        ...


class StarknetSignatureVerifier:
    """Ask the account contract itself whether it accepts the signature over the hash."""

    def __init__(self, rpc: StarknetRpcClient):
        self._rpc = rpc

    async def verify(self, account_address: int, signed_data: SignedData) -> None:
        calldata = [
            signed_data.hash,
            2,
            signed_data.signature.r,
            signed_data.signature.s,
        ]
        try:
            result = await self._rpc.call(account_address, IS_VALID_SIGNATURE_SELECTOR, calldata)
        except StarknetRpcError as exc:
            if exc.code == CONTRACT_NOT_FOUND:
                raise SignatureError(SignatureErrorReason.ACCOUNT_NOT_FOUND, str(exc)) from exc
            if exc.code == CONTRACT_ERROR:
                raise SignatureError(SignatureErrorReason.INVALID_SIGNATURE, str(exc)) from exc
            raise SignatureError(SignatureErrorReason.TRANSPORT, str(exc)) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SignatureError(SignatureErrorReason.TRANSPORT, str(exc)) from exc

        # Cairo 0 accounts revert on a bad signature; Cairo 1 accounts return 'VALID' or 0.
        if result and result[0] not in (1, VALID):
            raise SignatureError(
                SignatureErrorReason.INVALID_SIGNATURE,
                f"is_valid_signature returned {hex(result[0])}",
            )
        logger.debug("signature_verified account=%s", hex(account_address))
