"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_REGISTRAR_ENV = (
    "GITHUB_ID",
    "GITHUB_SECRET",
    "GITHUB_ACCESS_TOKEN_URL",
    "GITHUB_USER_API_URL",
    "STARKNET_RPC_URL",
    "STARKNET_CHAIN",
    "STARKNET_ACCOUNT",
    "STARKNET_PRIVATE_KEY",
    "BADGE_REGISTRY_ADDRESS",
    "REGISTRAR_NONCE_STRATEGY",
    "STARKNET_NONCE_BLOCK_ID",
    "REGISTRAR_HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _clear_registrar_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _REGISTRAR_ENV:
        monkeypatch.delenv(key, raising=False)
