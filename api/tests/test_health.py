"""Health, readiness, version and landing endpoints."""

import re
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fakes import FakeIdentityProvider, FakeNonceAllocator, FakeRegistryWriter, FakeSignatureVerifier
from registrar import main as main_module
from registrar.main import app
from registrar.services.registration_service import RegistrationService


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def configured_service():
    saved = getattr(app.state, "registration_service", None)
    app.state.registration_service = RegistrationService(
        identity_provider=FakeIdentityProvider(),
        signature_verifier=FakeSignatureVerifier(),
        registry_writer=FakeRegistryWriter(),
        nonce_allocator=FakeNonceAllocator(),
    )
    yield app.state.registration_service
    app.state.registration_service = saved


@pytest.mark.asyncio
async def test_health_api_contract(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert set(data.keys()) == {"status", "version", "timestamp", "started_at", "uptime_seconds"}
    assert data["status"] == "ok"
    assert re.match(r"^\d+\.\d+\.\d+$", data["version"])
    assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")).tzinfo is not None
    assert data["uptime_seconds"] >= 0


@pytest.mark.asyncio
async def test_ready_is_503_without_configuration(client: AsyncClient):
    saved = app.state.registration_service
    app.state.registration_service = None
    try:
        response = await client.get("/api/ready")
    finally:
        app.state.registration_service = saved

    assert response.status_code == 503
    assert response.json() == {"detail": "not ready"}


@pytest.mark.asyncio
async def test_ready_when_configured(client: AsyncClient, configured_service):
    response = await client.get("/api/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_version(client: AsyncClient):
    response = await client.get("/api/version")

    assert response.status_code == 200
    assert response.json() == {"version": "1.0.0"}


@pytest.mark.asyncio
async def test_root_returns_landing_info(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert set(data.keys()) == {"name", "version", "docs", "health"}
    assert data["docs"] == "/docs"
    assert data["health"] == "/api/health"


@pytest.mark.asyncio
async def test_docs_returns_200(client: AsyncClient):
    response = await client.get("/docs", follow_redirects=True)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_ready_is_503_when_starknet_library_missing(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    for key, value in {
        "GITHUB_ID": "id",
        "GITHUB_SECRET": "secret",
        "STARKNET_RPC_URL": "https://starknet.rpc.test",
        "STARKNET_ACCOUNT": "0xabc",
        "STARKNET_PRIVATE_KEY": "0x1",
        "BADGE_REGISTRY_ADDRESS": "0x1",
    }.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setattr(main_module, "_starknet_library_available", lambda: False)
    keys = ("registration_service", "starknet_rpc", "config_error")
    saved = {key: getattr(app.state, key, None) for key in keys}
    main_module.configure_registrar(app)
    try:
        response = await client.get("/api/ready")
    finally:
        for key, value in saved.items():
            setattr(app.state, key, value)

    assert response.status_code == 503
    assert response.json() == {"detail": "not ready"}
