"""Process configuration read from the environment.

GitHub OAuth app:
- GITHUB_ID, GITHUB_SECRET (required)
- GITHUB_ACCESS_TOKEN_URL, GITHUB_USER_API_URL (optional overrides)

Starknet signer + registry:
- STARKNET_RPC_URL, STARKNET_ACCOUNT, STARKNET_PRIVATE_KEY, BADGE_REGISTRY_ADDRESS (required)
- STARKNET_CHAIN: TESTNET (Sepolia, default) or MAINNET
- REGISTRAR_NONCE_STRATEGY: sequential (default), timestamp or ledger
- STARKNET_NONCE_BLOCK_ID: block tag used for the signer nonce query (default pending)

Shared:
- REGISTRAR_HTTP_TIMEOUT_SECONDS (default 20)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from registrar.models.registration import NonceStrategy, parse_field_element

GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_API_URL = "https://api.github.com/user"

STARKNET_CHAIN_IDS = {
    "MAINNET": int.from_bytes(b"SN_MAIN", "big"),
    "TESTNET": int.from_bytes(b"SN_SEPOLIA", "big"),
    "SEPOLIA": int.from_bytes(b"SN_SEPOLIA", "big"),
}


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _require(names: list[str]) -> dict[str, str]:
    values = {name: _env(name) for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        joined = ",".join(sorted(missing))
        raise ValueError(f"missing_required_env:{joined}")
    return values


def _felt_env(name: str, raw: str) -> int:
    try:
        return parse_field_element(raw)
    except ValueError as exc:
        raise ValueError(f"invalid_env:{name}") from exc


def http_timeout_seconds() -> float:
    raw = _env("REGISTRAR_HTTP_TIMEOUT_SECONDS", "20")
    try:
        return max(1.0, float(raw))
    except ValueError:
        return 20.0


@dataclass(frozen=True)
class GitHubOAuthConfig:
    client_id: str
    client_secret: str = field(repr=False)
    access_token_url: str = GITHUB_ACCESS_TOKEN_URL
    user_api_url: str = GITHUB_USER_API_URL
    timeout_seconds: float = 20.0

    @classmethod
    def from_env(cls) -> GitHubOAuthConfig:
        required = _require(["GITHUB_ID", "GITHUB_SECRET"])
        return cls(
            client_id=required["GITHUB_ID"],
            client_secret=required["GITHUB_SECRET"],
            access_token_url=_env("GITHUB_ACCESS_TOKEN_URL", GITHUB_ACCESS_TOKEN_URL),
            user_api_url=_env("GITHUB_USER_API_URL", GITHUB_USER_API_URL),
            timeout_seconds=http_timeout_seconds(),
        )


@dataclass(frozen=True)
class StarknetConfig:
    rpc_url: str
    chain_id: int
    account_address: int
    private_key: int = field(repr=False)
    badge_registry_address: int
    nonce_strategy: NonceStrategy = NonceStrategy.SEQUENTIAL
    nonce_block_id: str = "pending"
    timeout_seconds: float = 20.0

    @classmethod
    def from_env(cls) -> StarknetConfig:
        required = _require(
            ["STARKNET_RPC_URL", "STARKNET_ACCOUNT", "STARKNET_PRIVATE_KEY", "BADGE_REGISTRY_ADDRESS"]
        )
        chain = _env("STARKNET_CHAIN", "TESTNET").upper()
        if chain not in STARKNET_CHAIN_IDS:
            raise ValueError(f"unsupported_starknet_chain:{chain}")
        strategy_raw = _env("REGISTRAR_NONCE_STRATEGY", NonceStrategy.SEQUENTIAL.value).lower()
        try:
            strategy = NonceStrategy(strategy_raw)
        except ValueError as exc:
            raise ValueError(f"unsupported_nonce_strategy:{strategy_raw}") from exc

        return cls(
            rpc_url=required["STARKNET_RPC_URL"],
            chain_id=STARKNET_CHAIN_IDS[chain],
            account_address=_felt_env("STARKNET_ACCOUNT", required["STARKNET_ACCOUNT"]),
            private_key=_felt_env("STARKNET_PRIVATE_KEY", required["STARKNET_PRIVATE_KEY"]),
            badge_registry_address=_felt_env("BADGE_REGISTRY_ADDRESS", required["BADGE_REGISTRY_ADDRESS"]),
            nonce_strategy=strategy,
            nonce_block_id=_env("STARKNET_NONCE_BLOCK_ID", "pending"),
            timeout_seconds=http_timeout_seconds(),
        )


def allowed_origins() -> list[str]:
    raw = _env("ALLOWED_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
