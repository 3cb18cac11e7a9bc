from __future__ import annotations

import pytest
from fastapi import FastAPI

from registrar.config import STARKNET_CHAIN_IDS, GitHubOAuthConfig, StarknetConfig
from registrar import main as main_module
from registrar.main import configure_registrar
from registrar.models.registration import NonceStrategy
from registrar.services.nonce_allocator import (
    LedgerAssignedNonceAllocator,
    SequentialNonceAllocator,
    TimestampNonceAllocator,
)
from registrar.services.registration_service import RegistrationService, build_nonce_allocator
from registrar.services.starknet_rpc import StarknetRpcClient


def _set_starknet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STARKNET_RPC_URL", "https://starknet.rpc.test")
    monkeypatch.setenv("STARKNET_ACCOUNT", "0xabc")
    monkeypatch.setenv("STARKNET_PRIVATE_KEY", f"0x{'1' * 60}")
    monkeypatch.setenv("BADGE_REGISTRY_ADDRESS", "0x04e16efc9bc2d8d40ecb73d3d69e3e2d6f0fc3e2e6e9b7601310fdfa7dd6c7cf")


def test_github_config_requires_credentials() -> None:
    with pytest.raises(ValueError, match="missing_required_env:GITHUB_ID,GITHUB_SECRET"):
        GitHubOAuthConfig.from_env()


def test_github_config_defaults_to_public_github(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_ID", "id")
    monkeypatch.setenv("GITHUB_SECRET", "secret")

    config = GitHubOAuthConfig.from_env()

    assert config.access_token_url == "https://github.com/login/oauth/access_token"
    assert config.user_api_url == "https://api.github.com/user"
    assert "secret" not in repr(config)


def test_starknet_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_starknet_env(monkeypatch)
    monkeypatch.setenv("STARKNET_CHAIN", "mainnet")
    monkeypatch.setenv("REGISTRAR_NONCE_STRATEGY", "timestamp")

    config = StarknetConfig.from_env()

    assert config.chain_id == STARKNET_CHAIN_IDS["MAINNET"]
    assert config.account_address == 0xABC
    assert config.nonce_strategy == NonceStrategy.TIMESTAMP
    assert config.nonce_block_id == "pending"


def test_starknet_config_rejects_unknown_chain(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_starknet_env(monkeypatch)
    monkeypatch.setenv("STARKNET_CHAIN", "GOERLI2")

    with pytest.raises(ValueError, match="unsupported_starknet_chain"):
        StarknetConfig.from_env()


def test_starknet_config_rejects_invalid_address(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_starknet_env(monkeypatch)
    monkeypatch.setenv("STARKNET_ACCOUNT", "0xnothex")

    with pytest.raises(ValueError, match="invalid_env:STARKNET_ACCOUNT"):
        StarknetConfig.from_env()


def test_starknet_config_rejects_unknown_nonce_strategy(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_starknet_env(monkeypatch)
    monkeypatch.setenv("REGISTRAR_NONCE_STRATEGY", "random")

    with pytest.raises(ValueError, match="unsupported_nonce_strategy:random"):
        StarknetConfig.from_env()


@pytest.mark.parametrize(
    ("strategy", "expected"),
    [
        (NonceStrategy.SEQUENTIAL, SequentialNonceAllocator),
        (NonceStrategy.TIMESTAMP, TimestampNonceAllocator),
        (NonceStrategy.LEDGER, LedgerAssignedNonceAllocator),
    ],
)
def test_build_nonce_allocator_follows_strategy(strategy: NonceStrategy, expected: type) -> None:
    config = StarknetConfig(
        rpc_url="https://starknet.rpc.test",
        chain_id=1,
        account_address=0xABC,
        private_key=0x1,
        badge_registry_address=0x2,
        nonce_strategy=strategy,
    )

    allocator = build_nonce_allocator(config, StarknetRpcClient(config.rpc_url))

    assert isinstance(allocator, expected)


def test_timestamp_strategy_warns_that_starknet_rejects_it(caplog: pytest.LogCaptureFixture) -> None:
    config = StarknetConfig(
        rpc_url="https://starknet.rpc.test",
        chain_id=1,
        account_address=0xABC,
        private_key=0x1,
        badge_registry_address=0x2,
        nonce_strategy=NonceStrategy.TIMESTAMP,
    )

    with caplog.at_level("WARNING"):
        build_nonce_allocator(config, StarknetRpcClient(config.rpc_url))

    assert "timestamp_nonce_strategy_selected" in caplog.text


def test_configure_registrar_with_incomplete_env_leaves_service_unset() -> None:
    target = FastAPI()

    configure_registrar(target)

    assert target.state.registration_service is None
    assert target.state.starknet_rpc is None
    assert "missing_required_env" in target.state.config_error


def test_configure_registrar_wires_service(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "_starknet_library_available", lambda: True)
    monkeypatch.setenv("GITHUB_ID", "id")
    monkeypatch.setenv("GITHUB_SECRET", "secret")
    _set_starknet_env(monkeypatch)
    target = FastAPI()

    configure_registrar(target)

    assert isinstance(target.state.registration_service, RegistrationService)
    assert isinstance(target.state.starknet_rpc, StarknetRpcClient)
    assert target.state.config_error is None


def test_configure_registrar_without_starknet_library_is_not_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_ID", "id")
    monkeypatch.setenv("GITHUB_SECRET", "secret")
    _set_starknet_env(monkeypatch)
    monkeypatch.setattr(main_module, "_starknet_library_available", lambda: False)
    target = FastAPI()

    configure_registrar(target)

    assert target.state.registration_service is None
    assert target.state.starknet_rpc is None
    assert target.state.config_error == "missing_dependency_starknet_py"
