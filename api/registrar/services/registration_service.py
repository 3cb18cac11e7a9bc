"""Contributor registration pipeline.

GitHub code -> access token -> user id, then proof that the caller controls the
Starknet account, then one invoke on the badge registry from the signer
account. Every step short-circuits and none is retried; only the last one
writes anything.
"""

from __future__ import annotations

import logging

from registrar.config import GitHubOAuthConfig, StarknetConfig
from registrar.models.registration import NonceStrategy, SignedData
from registrar.services.challenge_binding import ChallengeBinding, PedersenChallengeBinding
from registrar.services.github_identity_provider import GitHubIdentityProvider, IdentityProvider
from registrar.services.nonce_allocator import (
    LedgerAssignedNonceAllocator,
    NonceAllocator,
    SequentialNonceAllocator,
    TimestampNonceAllocator,
)
from registrar.services.registration_errors import RegistrationError, RegistrationErrorKind
from registrar.services.registry_writer import RegistryWriter, StarknetRegistryWriter
from registrar.services.signature_verifier import SignatureVerifier, StarknetSignatureVerifier
from registrar.services.starknet_rpc import StarknetRpcClient

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(
        self,
        identity_provider: IdentityProvider,
        signature_verifier: SignatureVerifier,
        registry_writer: RegistryWriter,
        nonce_allocator: NonceAllocator,
        challenge_binding: ChallengeBinding | None = None,
    ):
        self._identity_provider = identity_provider
        self._signature_verifier = signature_verifier
        self._registry_writer = registry_writer
        self._nonce_allocator = nonce_allocator
        self._challenge_binding = challenge_binding

    async def register_contributor(
        self,
        authorization_code: str,
        account_address: int,
        signed_data: SignedData,
    ) -> int:
        """Return the registry transaction hash or raise ``RegistrationError``."""
        try:
            access_token = await self._identity_provider.new_access_token(authorization_code)
        except Exception as exc:
            raise RegistrationError(RegistrationErrorKind.AUTHENTICATION, exc) from exc

        try:
            identity = await self._identity_provider.get_user_id(access_token)
        except Exception as exc:
            raise RegistrationError(RegistrationErrorKind.IDENTIFICATION, exc) from exc

        try:
            if self._challenge_binding is not None:
                self._challenge_binding.check(authorization_code, signed_data)
            await self._signature_verifier.verify(account_address, signed_data)
        except Exception as exc:
            raise RegistrationError(RegistrationErrorKind.SIGNATURE, exc) from exc

        try:
            async with self._nonce_allocator.reserve() as nonce:
                transaction_hash = await self._registry_writer.register(account_address, identity, nonce)
        except Exception as exc:
            raise RegistrationError(RegistrationErrorKind.REGISTRY, exc) from exc

        logger.debug(
            "registration_submitted account=%s identity=%s nonce=%s tx=%s",
            hex(account_address),
            identity,
            nonce,
            hex(transaction_hash),
        )
        return transaction_hash


def build_nonce_allocator(config: StarknetConfig, rpc: StarknetRpcClient) -> NonceAllocator:
    if config.nonce_strategy == NonceStrategy.TIMESTAMP:
        logger.warning("timestamp_nonce_strategy_selected starknet_requires_sequential_nonces=true")
        return TimestampNonceAllocator()
    if config.nonce_strategy == NonceStrategy.LEDGER:
        return LedgerAssignedNonceAllocator()
    return SequentialNonceAllocator(rpc, config.account_address, block_id=config.nonce_block_id)


def build_registration_service(
    github_config: GitHubOAuthConfig,
    starknet_config: StarknetConfig,
    rpc: StarknetRpcClient,
) -> RegistrationService:
    logger.info(
        "registration_service_configured signer=%s registry=%s nonce_strategy=%s",
        hex(starknet_config.account_address),
        hex(starknet_config.badge_registry_address),
        starknet_config.nonce_strategy.value,
    )
    return RegistrationService(
        identity_provider=GitHubIdentityProvider(github_config),
        signature_verifier=StarknetSignatureVerifier(rpc),
        registry_writer=StarknetRegistryWriter(starknet_config),
        nonce_allocator=build_nonce_allocator(starknet_config, rpc),
        challenge_binding=PedersenChallengeBinding(),
    )
