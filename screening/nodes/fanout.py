# screening/nodes/fanout.py

"""
Fan-Out Coordinator.

Issues every active Source Adapter concurrently for one query and waits for
all of them. There is no early exit: a screening must not silently skip a
configured source, so the stage is as slow as its slowest source and one
failing source only reduces coverage.
"""

import asyncio
from typing import Optional, Sequence

from config.settings import Settings
from screening.models.inputs import ScreeningQuery
from screening.models.outputs import CanonicalRecord, FanOutResult, SourceOutcome
from screening.sources import SourceAdapter, build_default_adapters
from screening.utils.logger import get_logger
from screening.utils.search_terms import build_search_terms

logger = get_logger("FanOut")


class FanOutCoordinator:
    """Runs all configured sources for a query and collects every outcome."""

    def __init__(self, settings: Settings, adapters: Optional[Sequence[SourceAdapter]] = None):
        self.settings = settings
        self.adapters = list(adapters) if adapters is not None else build_default_adapters(settings)

    async def run(self, query: ScreeningQuery) -> FanOutResult:
        """
        Fan out ``query`` to every active source and fan the results back in.

        Args:
            query: A validated screening query.

        Returns:
            FanOutResult with one outcome per adapter (in adapter order,
            unconfigured ones marked NOT_CONFIGURED) and the concatenated
            records.

        Raises:
            ValueError: If the query has no subject.
        """
        if not query.subject or not query.subject.strip():
            raise ValueError("Name is required")

        search_terms = build_search_terms(query, self.settings.compliance_keyword_count)

        active = [a for a in self.adapters if a.is_configured()]
        skipped = {a.name for a in self.adapters if not a.is_configured()}
        if skipped:
            logger.info(f"Sources not configured, skipping: {sorted(skipped)}")

        logger.info(
            f"Fanning out '{query.subject}' to {len(active)} sources",
            sources=[a.name for a in active],
            terms=len(search_terms.terms),
        )

        # Join all; a task's failure never cancels its siblings
        results = await asyncio.gather(
            *(adapter.fetch(search_terms) for adapter in active),
            return_exceptions=True,
        )

        by_name: dict[str, SourceOutcome] = {}
        for adapter, result in zip(active, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.error(
                    f"Source {adapter.name} raised past its boundary: {result}",
                    exc_info=result,
                )
                result = SourceOutcome.failed(adapter.name, f"{result.__class__.__name__}: {result}")
            by_name[adapter.name] = result

        outcomes = [
            by_name[a.name] if a.name in by_name else SourceOutcome.not_configured(a.name)
            for a in self.adapters
        ]

        combined: list[CanonicalRecord] = []
        for outcome in outcomes:
            combined.extend(outcome.records)

        failed = [o.source_name for o in outcomes if o.error]
        logger.info(
            f"Fan-out complete: {len(combined)} records, {len(failed)} failed sources",
            failed_sources=failed,
        )

        return FanOutResult(
            search_terms=list(search_terms.terms),
            outcomes=outcomes,
            combined_records=combined,
        )
