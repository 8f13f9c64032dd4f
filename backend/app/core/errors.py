"""Exceptions raised across the ratings pipeline."""

from typing import Optional


class RatingsError(Exception):
    """Base class for every error this service raises on purpose."""


class ConfigurationError(RatingsError):
    """A required credential or setting is missing."""


class UpstreamError(RatingsError):
    """A load-bearing upstream API answered with a non-success status."""

    def __init__(self, service: str, status: Optional[int], body: str = "") -> None:
        self.service = service
        self.status = status
        self.body = body
        label = status if status is not None else "network error"
        super().__init__(f"{service} {label}: {body}")


class AggregationError(RatingsError):
    """Primary show metadata could not be obtained, so there is nothing to merge into."""
