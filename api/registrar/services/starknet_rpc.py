"""Minimal Starknet JSON-RPC client (httpx only).

Covers the read-only calls the registrar needs: contract calls, the signer
account nonce and transaction status. Transaction signing lives in
``registry_writer``.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from registrar.services.registration_errors import StarknetRpcError

CONTRACT_NOT_FOUND = 20
TXN_HASH_NOT_FOUND = 29
CONTRACT_ERROR = 40


class StarknetRpcClient:
    def __init__(self, rpc_url: str, timeout: float = 20.0):
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._ids = itertools.count(1)

    async def call(self, contract_address: int, entry_point_selector: int, calldata: list[int]) -> list[int]:
        result = await self._rpc(
            "starknet_call",
            {
                "request": {
                    "contract_address": hex(contract_address),
                    "entry_point_selector": hex(entry_point_selector),
                    "calldata": [hex(value) for value in calldata],
                },
                "block_id": "latest",
            },
        )
        if not isinstance(result, list):
            raise StarknetRpcError("invalid_response", "starknet_call result is not a list")
        return [self._hex_or_int_to_int(value) for value in result]

    async def get_nonce(self, contract_address: int, block_id: str = "pending") -> int:
        result = await self._rpc(
            "starknet_getNonce",
            {"block_id": block_id, "contract_address": hex(contract_address)},
        )
        return self._hex_or_int_to_int(result)

    async def get_transaction_status(self, transaction_hash: int) -> dict[str, Any]:
        result = await self._rpc("starknet_getTransactionStatus", {"transaction_hash": hex(transaction_hash)})
        if not isinstance(result, dict) or "finality_status" not in result:
            raise StarknetRpcError("invalid_response", "transaction status missing finality_status")
        return result

    async def _rpc(self, method: str, params: dict[str, Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()

        if not isinstance(body, dict):
            raise StarknetRpcError("invalid_response", f"{method} returned a non-object body")
        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = str(error.get("message") or "")
                data = error.get("data")
                if data:
                    message = f"{message} ({data})"
                raise StarknetRpcError(error.get("code", "unknown"), message)
            raise StarknetRpcError("unknown", str(error))
        return body.get("result")

    def _hex_or_int_to_int(self, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("0x"):
                return int(raw, 16)
            return int(raw)
        raise StarknetRpcError("invalid_response", "invalid numeric value")
