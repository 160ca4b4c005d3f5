from __future__ import annotations


class UpstreamCallFailed(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        code: str = "upstream_failed",
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class ThrottledExhausted(UpstreamCallFailed):
    def __init__(self, message: str, *, attempts: int):
        super().__init__(message, code="throttled", status_code=429)
        self.attempts = attempts


class EnvelopeMalformed(UpstreamCallFailed):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message, code="envelope_malformed", status_code=status_code)


class EnrichmentTimeout(UpstreamCallFailed):
    def __init__(self, message: str):
        super().__init__(message, code="timeout")


class ProviderNotConfigured(UpstreamCallFailed):
    def __init__(self, message: str):
        super().__init__(message, code="not_configured")
