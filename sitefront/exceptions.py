"""
Error taxonomy

  ValidationError      bad subdomain / domain / reserved name   → 400, never retried
  ConflictError        duplicate subdomain / domain             → 409, never retried
  ForbiddenError       missing or wrong admin service token      → 403
  NotFoundError        missing site / domain record             → 404
  PayloadTooLargeError upload over MAX_FILE_SIZE                 → 413
  ProviderConfigError  provider credentials or project unset    → 503, fatal
  ProviderApiError     non-2xx / transport failure at provider  → 502
"""
from typing import Optional


class SiteFrontError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SiteFrontError):
    status_code = 400


class ConflictError(SiteFrontError):
    status_code = 409


class ForbiddenError(SiteFrontError):
    status_code = 403


class NotFoundError(SiteFrontError):
    status_code = 404


class PayloadTooLargeError(SiteFrontError):
    status_code = 413


class ProviderError(SiteFrontError):
    """Base for failures talking to the external domain provider."""
    status_code = 502


class ProviderConfigError(ProviderError):
    status_code = 503


class ProviderApiError(ProviderError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def is_transient(self) -> bool:
        """Transport failures, throttling and 5xx are worth retrying."""
        return self.status is None or self.status == 429 or self.status >= 500
