"""Error taxonomy shared by the core, the store, and both façades."""

from __future__ import annotations


class VibesRadarError(Exception):
    """Base class for all errors raised by this package."""


class ProviderCallError(VibesRadarError):
    """Network, auth, timeout, or HTTP status failure talking to a model provider."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class ParseError(VibesRadarError):
    """A provider replied but the body could not be decoded into a judgement."""


class StoreError(VibesRadarError):
    """The report store is unavailable or a query failed."""


class RecordNotFoundError(StoreError):
    """No analysis record exists for the requested brand."""

    def __init__(self, brand_name: str):
        super().__init__(f"No analysis found for brand '{brand_name}'")
        self.brand_name = brand_name


class AnalysisError(VibesRadarError):
    """Unexpected failure while running an analysis."""
