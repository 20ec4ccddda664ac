"""Pytest configuration and fixtures."""
import time
from typing import Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import sitefront.models  # noqa: F401  (registers every table on Base.metadata)
from sitefront.db.base_class import Base
from sitefront.exceptions import ProviderApiError
from sitefront.schemas.provider import ProviderDomainConfig
from sitefront.services.blob_store import LocalBlobStore
from sitefront.services.cache import SiteConfigCache

APEX_IPV4 = "76.76.21.21"
CNAME_TARGET = "cname.vercel-dns.com"

SITE_PAYLOAD = {
    "name": "Acme Inc",
    "subdomain": "acme",
    "title": "Acme Rockets",
    "description": "We make rockets",
    "primaryColor": "#ff0000",
    "secondaryColor": "#00ff00",
}


# --- Fakes ---

class FakeRedis:
    """In-memory stand-in for the handful of redis commands the cache uses."""

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.sets: Dict[str, set] = {}
        self.expiry: Dict[str, float] = {}

    def ping(self):
        return True

    def get(self, key):
        return self.values.get(key)

    def setex(self, key, ttl, value):
        self.values[key] = value
        self.expiry[key] = time.time() + ttl

    def sadd(self, key, *members):
        self.sets.setdefault(key, set()).update(members)

    def smembers(self, key):
        return set(self.sets.get(key, set()))

    def expire(self, key, ttl):
        self.expiry[key] = time.time() + ttl

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            elif self.sets.pop(key, None) is not None:
                removed += 1
        return removed


def provider_config(misconfigured=True, ipv4=APEX_IPV4, cname=CNAME_TARGET) -> ProviderDomainConfig:
    return ProviderDomainConfig.model_validate({
        "misconfigured": misconfigured,
        "recommendedIPv4": [{"rank": 1, "value": [ipv4]}] if ipv4 else [],
        "recommendedCNAME": [{"rank": 1, "value": cname}] if cname else [],
    })


class FakeGateway:
    """
    Records every provider call. Per-domain failures are configured through
    attach_errors / fetch_errors / detach_errors (domain -> exception).
    """

    def __init__(self):
        self.calls = []
        self.configs: Dict[str, ProviderDomainConfig] = {}
        self.attach_errors: Dict[str, Exception] = {}
        self.fetch_errors: Dict[str, Exception] = {}
        self.detach_errors: Dict[str, Exception] = {}

    async def attach(self, domain: str, redirect_target: Optional[str] = None) -> str:
        self.calls.append(("attach", domain, redirect_target))
        if domain in self.attach_errors:
            raise self.attach_errors[domain]
        return f"prv_{domain}"

    async def fetch_config(self, domain: str) -> ProviderDomainConfig:
        self.calls.append(("fetch_config", domain))
        if domain in self.fetch_errors:
            raise self.fetch_errors[domain]
        return self.configs.get(domain) or provider_config()

    async def detach(self, domain: str) -> None:
        self.calls.append(("detach", domain))
        if domain in self.detach_errors:
            raise self.detach_errors[domain]

    def called(self, operation: str):
        return [c[1] for c in self.calls if c[0] == operation]


def api_error(message="Vercel API error", status=400) -> ProviderApiError:
    return ProviderApiError(message, status=status)


# --- Per-test fixtures ---

@pytest.fixture
def test_engine():
    """In-memory SQLite shared across sessions of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"), "http://files.test")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def site_cache(fake_redis):
    return SiteConfigCache(fake_redis, ttl=120)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def client(session_factory, blobs, site_cache, gateway):
    """
    Async HTTP client against the app with every external collaborator
    overridden: SQLite registry, tmp-dir blob store, in-memory cache and a
    fake domain provider.
    """
    from sitefront.main import app as fastapi_app
    from sitefront.api import deps

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[deps.get_db] = _override_get_db
    fastapi_app.dependency_overrides[deps.get_blob_store] = lambda: blobs
    fastapi_app.dependency_overrides[deps.get_site_cache] = lambda: site_cache
    fastapi_app.dependency_overrides[deps.get_domain_provider] = lambda: gateway

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()


# --- Helpers ---

async def create_site(client: AsyncClient, **overrides) -> dict:
    """Helper: create a site via the admin API and return its JSON."""
    payload = {**SITE_PAYLOAD, **overrides}
    resp = await client.post("/api/v1/sites/", json=payload)
    assert resp.status_code == 201, f"Create site failed: {resp.text}"
    return resp.json()
