"""Custom domain lifecycle: attach / refresh / remove against a fake provider."""
import threading
import uuid

import httpx
import pytest
from tenacity import wait_none

from sitefront.crud import crud_custom_domain, crud_site
from sitefront.exceptions import (
    ConflictError,
    NotFoundError,
    ProviderApiError,
    ProviderConfigError,
    ValidationError,
)
from sitefront.schemas.site import SiteCreate
from sitefront.services.custom_domains import DNS_UNKNOWN, CustomDomainOrchestrator
from tests.conftest import APEX_IPV4, CNAME_TARGET, api_error, provider_config


@pytest.fixture
def site(db):
    return crud_site.create(db, obj_in=SiteCreate(
        name="Acme", subdomain="acme", title="Acme", primary_color="#000", secondary_color="#fff",
    ))


@pytest.fixture
def orchestrator(db, gateway, site_cache):
    return CustomDomainOrchestrator(db, gateway, cache=site_cache)


# ── create_for_site ──

async def test_attach_apex_only(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "HTTPS://Example.com/", False)

    assert result.www_id is None
    record = crud_custom_domain.get(db, result.apex_id)
    assert record.domain == "example.com"
    assert record.status == "pending"
    assert record.verification_type == "A"
    assert record.verification_name == "example.com"
    assert record.verification_value == APEX_IPV4
    assert record.provider_domain_id == "prv_example.com"
    assert record.error is None
    assert gateway.called("attach") == ["example.com"]


async def test_attach_with_www_redirect(orchestrator, gateway, db, site):
    gateway.configs["example.com"] = provider_config(misconfigured=False)

    result = await orchestrator.create_for_site(site.id, "example.com", True)

    apex = crud_custom_domain.get(db, result.apex_id)
    www = crud_custom_domain.get(db, result.www_id)
    assert apex.status == "active"
    assert www.domain == "www.example.com"
    assert www.redirect_from_www is True
    assert www.verification_type == "CNAME"
    assert www.verification_value == CNAME_TARGET
    assert ("attach", "www.example.com", "example.com") in gateway.calls


async def test_www_failure_keeps_apex_and_records_error(orchestrator, gateway, db, site):
    gateway.attach_errors["www.example.com"] = api_error("Failed to add \"www.example.com\": quota exceeded")

    result = await orchestrator.create_for_site(site.id, "example.com", True)

    apex = crud_custom_domain.get(db, result.apex_id)
    www = crud_custom_domain.get(db, result.www_id)
    assert apex.status != "error"
    assert www.domain == "www.example.com"
    assert www.status == "error"
    assert "quota exceeded" in www.error
    assert www.provider_domain_id is None


async def test_apex_attach_failure_records_nothing(orchestrator, gateway, db, site):
    gateway.attach_errors["example.com"] = api_error("forbidden", status=403)

    with pytest.raises(ProviderApiError):
        await orchestrator.create_for_site(site.id, "example.com", True)

    assert crud_custom_domain.get_multi_by_site(db, site.id) == []
    assert gateway.called("attach") == ["example.com"]


async def test_config_fetch_failure_after_attach_is_persisted(orchestrator, gateway, db, site):
    gateway.fetch_errors["example.com"] = api_error("config unavailable", status=500)

    result = await orchestrator.create_for_site(site.id, "example.com", False)

    record = crud_custom_domain.get(db, result.apex_id)
    assert record.status == "error"
    assert record.error == "config unavailable"
    assert record.provider_domain_id == "prv_example.com"


async def test_pending_without_recommendation_is_error(orchestrator, gateway, db, site):
    gateway.configs["example.com"] = provider_config(misconfigured=True, ipv4=None, cname=None)

    result = await orchestrator.create_for_site(site.id, "example.com", False)

    record = crud_custom_domain.get(db, result.apex_id)
    assert record.status == "error"
    assert record.error == DNS_UNKNOWN.format(domain="example.com")
    assert record.verification_type is None


async def test_duplicate_domain_rejected_before_provider_call(orchestrator, gateway, db, site):
    await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.calls.clear()

    with pytest.raises(ConflictError):
        await orchestrator.create_for_site(site.id, "example.com", False)
    assert gateway.calls == []


async def test_duplicate_www_rejected(orchestrator, gateway, db, site):
    await orchestrator.create_for_site(site.id, "www.example.com", False)

    with pytest.raises(ConflictError, match="www.example.com"):
        await orchestrator.create_for_site(site.id, "example.com", True)
    assert crud_custom_domain.get_by_domain(db, "example.com") is None


async def test_unknown_site(orchestrator, gateway):
    with pytest.raises(NotFoundError):
        await orchestrator.create_for_site(uuid.uuid4(), "example.com", False)
    assert gateway.calls == []


async def test_invalid_domain(orchestrator, site):
    with pytest.raises(ValidationError):
        await orchestrator.create_for_site(site.id, "nodothost", False)


async def test_attach_invalidates_cached_domain_lookup(orchestrator, site, site_cache, fake_redis):
    site_cache.set("custom_domain:example.com", {"name": "stale"}, tags=["domain:example.com"])

    await orchestrator.create_for_site(site.id, "example.com", False)

    assert site_cache.get("custom_domain:example.com") is None


# ── refresh_status ──

async def test_refresh_moves_pending_to_active(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.configs["example.com"] = provider_config(misconfigured=False)

    record = await orchestrator.refresh_status(result.apex_id)

    assert record.status == "active"
    assert record.verification_value == APEX_IPV4


async def test_refresh_recovers_from_error(orchestrator, gateway, db, site):
    gateway.fetch_errors["example.com"] = api_error("temporarily down", status=503)
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    assert crud_custom_domain.get(db, result.apex_id).status == "error"

    del gateway.fetch_errors["example.com"]
    record = await orchestrator.refresh_status(result.apex_id)

    assert record.status == "pending"
    assert record.error is None
    assert record.verification_type == "A"


async def test_refresh_failure_persists_error_and_raises(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.fetch_errors["example.com"] = api_error("Vercel says no", status=400)

    with pytest.raises(ProviderApiError):
        await orchestrator.refresh_status(result.apex_id)

    db.expire_all()
    record = crud_custom_domain.get(db, result.apex_id)
    assert record.status == "error"
    assert record.error == "Vercel says no"
    # last known instruction is kept
    assert record.verification_value == APEX_IPV4


async def test_refresh_missing_record(orchestrator):
    with pytest.raises(NotFoundError):
        await orchestrator.refresh_status(uuid.uuid4())


async def test_refresh_retries_transient_failures(db, gateway, site, monkeypatch):
    orchestrator = CustomDomainOrchestrator(db, gateway, retry_attempts=3)
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.calls.clear()

    attempts = {"n": 0}
    original = gateway.fetch_config

    async def _flaky(domain):
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise api_error("gateway timeout", status=504)
        return await original(domain)

    monkeypatch.setattr(gateway, "fetch_config", _flaky)
    orchestrator.retry_wait = wait_none()

    record = await orchestrator.refresh_status(result.apex_id)
    assert attempts["n"] == 3
    assert record.status == "pending"


async def test_refresh_does_not_retry_client_errors(db, gateway, site, monkeypatch):
    orchestrator = CustomDomainOrchestrator(db, gateway, retry_attempts=3)
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.calls.clear()
    gateway.fetch_errors["example.com"] = api_error("bad request", status=400)

    with pytest.raises(ProviderApiError):
        await orchestrator.refresh_status(result.apex_id)
    assert gateway.called("fetch_config") == ["example.com"]


async def test_config_error_is_not_retried(db, gateway, site):
    orchestrator = CustomDomainOrchestrator(db, gateway, retry_attempts=3)
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.calls.clear()
    gateway.fetch_errors["example.com"] = ProviderConfigError("Missing Vercel configuration.")

    with pytest.raises(ProviderConfigError):
        await orchestrator.refresh_status(result.apex_id)
    assert len(gateway.called("fetch_config")) == 1


# ── remove_from_project ──

async def test_remove_detaches_and_deletes(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "example.com", False)

    outcome = await orchestrator.remove_from_project(result.apex_id)

    assert outcome.detached is True
    assert gateway.called("detach") == ["example.com"]
    assert crud_custom_domain.get(db, result.apex_id) is None


async def test_remove_ignores_provider_failure(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.detach_errors["example.com"] = api_error("not found on project", status=404)

    outcome = await orchestrator.remove_from_project(result.apex_id)

    assert outcome.detached is False
    assert "not found on project" in outcome.reason
    assert crud_custom_domain.get(db, result.apex_id) is None


async def test_remove_survives_unexpected_detach_failure(orchestrator, gateway, db, site):
    result = await orchestrator.create_for_site(site.id, "example.com", False)
    gateway.detach_errors["example.com"] = httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    outcome = await orchestrator.remove_from_project(result.apex_id)

    assert outcome.detached is False
    assert "non-printable" in outcome.reason
    assert crud_custom_domain.get(db, result.apex_id) is None


async def test_remove_missing_record_is_noop(orchestrator, gateway):
    assert await orchestrator.remove_from_project(uuid.uuid4()) is None
    assert gateway.calls == []


def test_list_for_site(orchestrator, db, site):
    assert orchestrator.list_for_site(site.id) == []


async def test_registry_writes_run_off_the_event_loop(orchestrator, db, site, monkeypatch):
    loop_thread = threading.get_ident()
    writer_threads = []
    create = crud_custom_domain.create

    def _create(*args, **kwargs):
        writer_threads.append(threading.get_ident())
        return create(*args, **kwargs)

    monkeypatch.setattr(crud_custom_domain, "create", _create)

    await orchestrator.create_for_site(site.id, "example.com", True)

    assert len(writer_threads) == 2
    assert loop_thread not in writer_threads
