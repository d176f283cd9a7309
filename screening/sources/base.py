# screening/sources/base.py

"""
Abstract base class for all Source Adapters.

An adapter wraps one external search/screening provider behind a uniform
``fetch(search_terms) -> SourceOutcome`` contract. Remote failures (network
errors, timeouts, non-2xx responses, malformed payloads) are captured here
and returned as data; they never reach the coordinator as exceptions.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from config.settings import Settings
from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord, SourceOutcome
from screening.utils.logger import get_logger

logger = get_logger("SourceAdapter")


class SourceFetchError(Exception):
    """Raised inside an adapter when a provider could not be queried."""

    def __init__(self, source_name: str, message: str, original_error: Optional[Exception] = None):
        self.source_name = source_name
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_name}: {message}")


# Failures converted to a FAILED outcome at the adapter boundary
CAPTURED_ERRORS = (requests.RequestException, ValueError, SourceFetchError)


class SourceAdapter(ABC):
    """Base for every source; subclasses implement ``_fetch_records``."""

    name: str = "Unknown"
    requires_credential: bool = False

    def __init__(self, settings: Settings):
        self.settings = settings
        self.timeout = settings.source_timeout
        self.headers = {"User-Agent": settings.user_agent}

    def is_configured(self) -> bool:
        """False when a credential this source needs is absent."""
        return True

    @abstractmethod
    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        """Blocking provider query. Runs in a worker thread."""

    async def fetch(self, search_terms: SearchTermSet) -> SourceOutcome:
        """
        Query the provider and return its outcome.

        Never raises for remote-I/O or payload failures; those become an
        outcome with ``error`` set and no records.
        """
        start_time = time.monotonic()
        try:
            records = await asyncio.to_thread(self._fetch_records, search_terms)
        except CAPTURED_ERRORS as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.warning(
                f"Source {self.name} failed after {duration_ms:.0f} ms: {e}",
                source=self.name,
            )
            return SourceOutcome.failed(self.name, _describe(e))

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            f"Source {self.name} returned {len(records)} records in {duration_ms:.0f} ms",
            source=self.name,
            count=len(records),
        )
        return SourceOutcome(source_name=self.name, records=records)

    # -------------------------------------------------------------------------
    # HTTP helpers
    # -------------------------------------------------------------------------

    def _get(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> requests.Response:
        """GET with the source timeout; non-2xx raises ``requests.HTTPError``."""
        response = requests.get(
            url,
            params=params,
            headers={**self.headers, **(headers or {})},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def _get_json(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> Any:
        return self._get(url, params=params, headers=headers).json()

    def _fetch_each_term(self, terms: tuple[str, ...], fetch_term) -> list[CanonicalRecord]:
        """
        Run ``fetch_term`` for every term, skipping failed terms.

        Raises ``SourceFetchError`` only when every term failed, so a
        partially answered source still contributes its records.
        """
        records: list[CanonicalRecord] = []
        last_error: Optional[Exception] = None
        failures = 0
        for term in terms:
            try:
                records.extend(fetch_term(term))
            except CAPTURED_ERRORS as e:
                failures += 1
                last_error = e
                logger.debug(f"Source {self.name} skipped term {term!r}: {e}")
        if terms and failures == len(terms):
            raise SourceFetchError(self.name, _describe(last_error), last_error)
        return records


def _describe(error: Exception) -> str:
    if isinstance(error, SourceFetchError):
        return error.message
    if isinstance(error, requests.Timeout):
        return f"Timeout: {error}"
    if isinstance(error, requests.HTTPError) and error.response is not None:
        return f"HTTP {error.response.status_code}"
    return f"{error.__class__.__name__}: {error}"
