"""
External domain provider gateway (Vercel REST API).

Three operations, one HTTP call each, no retries here:
  attach(domain, redirect_target)  POST   /v10/projects/{project}/domains
  fetch_config(domain)             GET    /v6/domains/{domain}/config
  detach(domain)                   DELETE /v9/projects/{project}/domains/{domain}

Failures surface as ProviderConfigError (credentials / project missing, raised
before any I/O) or ProviderApiError (non-2xx, transport error, unexpected
payload). The bearer token never appears in error messages.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as SchemaError

from sitefront.config import ProviderSettings
from sitefront.exceptions import ProviderApiError, ProviderConfigError
from sitefront.middleware.metrics import PROVIDER_CALLS
from sitefront.schemas.provider import ProviderDomain, ProviderDomainConfig

logger = logging.getLogger("sitefront.provider")

REDIRECT_STATUS_CODE = 308


def _error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if payload.get("message"):
            return str(payload["message"])
    return "Vercel API error"


class DomainProviderGateway:
    """
    Thin async client for the domain provider.

    `transport` is an httpx transport override (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        config: ProviderSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    # ── plumbing ──

    def _require_config(self) -> None:
        if not self.config.token:
            raise ProviderConfigError(
                "Missing Vercel configuration. Please set VERCEL_ACCESS_TOKEN."
            )
        if not self.config.project_id:
            raise ProviderConfigError(
                "Missing Vercel configuration. Please set VERCEL_PROJECT_ID."
            )

    def _scope_params(self) -> Dict[str, str]:
        if self.config.team_id:
            return {"teamId": self.config.team_id}
        if self.config.team_slug:
            return {"slug": self.config.team_slug}
        return {}

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        failure: str,
        json: Optional[dict] = None,
    ) -> Any:
        self._require_config()

        headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method, path, params=self._scope_params(), json=json, headers=headers
                )
        except httpx.TimeoutException:
            PROVIDER_CALLS.labels(operation=operation, outcome="error").inc()
            raise ProviderApiError(f"{failure}: request timed out")
        except httpx.HTTPError as e:
            PROVIDER_CALLS.labels(operation=operation, outcome="error").inc()
            raise ProviderApiError(f"{failure}: {e.__class__.__name__}")

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}

        if response.is_error:
            PROVIDER_CALLS.labels(operation=operation, outcome="error").inc()
            message = _error_message(payload)
            logger.warning(
                "Provider %s failed: HTTP %s: %s", operation, response.status_code, message
            )
            raise ProviderApiError(f"{failure}: {message}", status=response.status_code)

        PROVIDER_CALLS.labels(operation=operation, outcome="ok").inc()
        return payload

    def _project_domains_path(self) -> str:
        return f"/v10/projects/{quote(self.config.project_id, safe='')}/domains"

    # ── operations ──

    async def attach(self, domain: str, redirect_target: Optional[str] = None) -> str:
        """Add `domain` to the project (optionally as a redirect); return the provider-side id."""
        body: Dict[str, Any] = {"name": domain}
        if redirect_target:
            body["redirect"] = redirect_target
            body["redirectStatusCode"] = REDIRECT_STATUS_CODE

        payload = await self._call(
            "attach",
            "POST",
            self._project_domains_path(),
            f'Failed to add "{domain}" to the Vercel project',
            json=body,
        )
        try:
            attached = ProviderDomain.model_validate(payload)
        except SchemaError:
            raise ProviderApiError(
                f'Unexpected response from Vercel while adding "{domain}".'
            )
        logger.info("Attached %s to provider project (redirect=%s)", domain, redirect_target)
        # project domains are keyed by name on the provider side
        return attached.id or attached.name

    async def fetch_config(self, domain: str) -> ProviderDomainConfig:
        payload = await self._call(
            "fetch_config",
            "GET",
            f"/v6/domains/{quote(domain, safe='')}/config",
            f'Failed to load DNS configuration for "{domain}" from Vercel',
        )
        try:
            return ProviderDomainConfig.model_validate(payload)
        except SchemaError:
            raise ProviderApiError(
                f'Unexpected DNS configuration payload from Vercel for "{domain}".'
            )

    async def detach(self, domain: str) -> None:
        await self._call(
            "detach",
            "DELETE",
            f"/v9/projects/{quote(self.config.project_id, safe='')}/domains/{quote(domain, safe='')}",
            f'Failed to remove "{domain}" from the Vercel project',
        )
        logger.info("Detached %s from provider project", domain)
