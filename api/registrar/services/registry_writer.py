from __future__ import annotations

import logging
from typing import Any, Protocol

from registrar.config import StarknetConfig
from registrar.services.registration_errors import RegistryError

logger = logging.getLogger(__name__)

REGISTER_ENTRY_POINT = "register_github_identifier"


class RegistryWriter(Protocol):
    async def register(self, account_address: int, identity: int, nonce: int | None) -> int:
        ...


class StarknetRegistryWriter:
    """Invoke the badge registry from the service's own signer account.

    Not idempotent: two calls for the same (account, identity) pair send two
    transactions. The registry contract is the one rejecting duplicates.
    """

    def __init__(self, config: StarknetConfig):
        self._config = config
        self._account: Any = None

    async def register(self, account_address: int, identity: int, nonce: int | None) -> int:
        try:
            account = self._signer_account()
            call = self._registration_call(account_address, identity)
            response = await account.execute_v3(calls=[call], nonce=nonce, auto_estimate=True)
            transaction_hash = int(response.transaction_hash)
        except RegistryError:
            raise
        except Exception as exc:
            raise RegistryError(f"registry_invoke_failed:{exc.__class__.__name__}:{exc}") from exc

        logger.info(
            "registry_invoke_sent account=%s identity=%s nonce=%s tx=%s",
            hex(account_address),
            identity,
            nonce if nonce is not None else "ledger",
            hex(transaction_hash),
        )
        return transaction_hash

    def _signer_account(self) -> Any:
        if self._account is None:
            self._account = self._load_account()
        return self._account

    def _registration_call(self, account_address: int, identity: int) -> Any:
        from starknet_py.hash.selector import get_selector_from_name  # type: ignore
        from starknet_py.net.client_models import Call  # type: ignore

        return Call(
            to_addr=self._config.badge_registry_address,
            selector=get_selector_from_name(REGISTER_ENTRY_POINT),
            calldata=[account_address, identity],
        )

    def _load_account(self) -> Any:
        try:
            from starknet_py.net.account.account import Account  # type: ignore
            from starknet_py.net.full_node_client import FullNodeClient  # type: ignore
            from starknet_py.net.signer.stark_curve_signer import KeyPair  # type: ignore
        except Exception as exc:  # pragma: no cover - import-time behavior
            raise RegistryError("missing_dependency_starknet_py") from exc
        return Account(
            client=FullNodeClient(node_url=self._config.rpc_url),
            address=self._config.account_address,
            key_pair=KeyPair.from_private_key(self._config.private_key),
            chain=self._config.chain_id,
        )
