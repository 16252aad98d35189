"""HTTP client for the observability API."""

from .observability import ObservabilityClient, ObservabilityClientError

__all__ = ["ObservabilityClient", "ObservabilityClientError"]
