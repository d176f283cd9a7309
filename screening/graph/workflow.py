from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Sequence

from langgraph.graph import END, StateGraph

from config.settings import Settings
from screening.graph.state import ScreeningState
from screening.llm.factory import LLMFactory
from screening.models.inputs import ScreeningQuery
from screening.models.outputs import (
    AdverseMediaSummary,
    ScreeningResult,
    SourceSummary,
)
from screening.nodes.classification import RelevanceClassifier
from screening.nodes.fanout import FanOutCoordinator
from screening.sources import SourceAdapter
from screening.utils.dedup import deduplicate
from screening.utils.logger import get_logger
from screening.utils.risk import assess_risk, count_categories, has_findings

logger = get_logger("Workflow")


class AdverseMediaWorkflow:
    """
    The screening pipeline, implemented as a LangGraph state graph:

        fetch_sources -> deduplicate -> [classify] -> assess_risk -> END

    The classification step is routed around when there is nothing to
    classify or no model is configured.
    """

    def __init__(
        self,
        settings: Settings,
        llm_factory: Optional[LLMFactory] = None,
        adapters: Optional[Sequence[SourceAdapter]] = None,
        classifier: Optional[RelevanceClassifier] = None,
    ):
        self.settings = settings
        self.llm_factory = llm_factory or LLMFactory(settings)
        self.coordinator = FanOutCoordinator(settings, adapters)
        if classifier is None:
            classifier = RelevanceClassifier(self.llm_factory.get_enrichment_llm(), settings)
        self.classifier = classifier
        self.graph = self._build_graph()

    # =========================================================================
    # Nodes
    # =========================================================================

    async def fetch_sources_node(self, state: ScreeningState) -> Dict[str, Any]:
        """Node 1: concurrent fan-out over every configured source."""
        logger.info("Executing node: fetch_sources")
        result = await self.coordinator.run(state["query"])
        return {
            "search_terms": result.search_terms,
            "outcomes": result.outcomes,
            "records": result.combined_records,
            "steps_completed": state.get("steps_completed", []) + ["fetch_sources"],
        }

    async def deduplicate_node(self, state: ScreeningState) -> Dict[str, Any]:
        """Node 2: collapse near-duplicate headlines, first seen wins."""
        records = state.get("records", [])
        unique = deduplicate(records, self.settings.dedup_key_length)
        logger.info(f"Deduplicated {len(records)} records to {len(unique)}.")
        return {
            "records": unique,
            "steps_completed": state.get("steps_completed", []) + ["deduplicate"],
        }

    async def classify_node(self, state: ScreeningState) -> Dict[str, Any]:
        """Node 3 (conditional): AI enrichment pass."""
        return await self.classifier.run(state)

    async def assess_risk_node(self, state: ScreeningState) -> Dict[str, Any]:
        """Node 4: deterministic risk aggregation."""
        risk = assess_risk(state.get("records", []))
        logger.info(f"Risk assessed: score={risk.score}, level={risk.level.value}")
        return {
            "risk": risk,
            "steps_completed": state.get("steps_completed", []) + ["assess_risk"],
        }

    # =========================================================================
    # Conditional Edges
    # =========================================================================

    def route_after_dedup(self, state: ScreeningState) -> Literal["classify", "risk"]:
        """Skip enrichment when there are no records or no configured model."""
        if state.get("records") and self.classifier.enabled:
            return "classify"
        if not self.classifier.enabled:
            logger.info("Enrichment not configured. Skipping classification.")
        return "risk"

    # =========================================================================
    # Graph Builder
    # =========================================================================

    def _build_graph(self):
        workflow = StateGraph(ScreeningState)

        workflow.add_node("fetch_sources", self.fetch_sources_node)
        workflow.add_node("deduplicate", self.deduplicate_node)
        workflow.add_node("classify", self.classify_node)
        workflow.add_node("assess_risk", self.assess_risk_node)

        workflow.set_entry_point("fetch_sources")
        workflow.add_edge("fetch_sources", "deduplicate")
        workflow.add_conditional_edges(
            "deduplicate",
            self.route_after_dedup,
            {
                "classify": "classify",
                "risk": "assess_risk",
            },
        )
        workflow.add_edge("classify", "assess_risk")
        workflow.add_edge("assess_risk", END)

        return workflow.compile()

    # =========================================================================
    # Public Runner
    # =========================================================================

    def build_result(self, state: ScreeningState) -> ScreeningResult:
        """Assemble the screening response from the final state."""
        query: ScreeningQuery = state["query"]
        records = state.get("records", [])
        risk = state.get("risk") or assess_risk(records)

        return ScreeningResult(
            subject=query.subject,
            subject_type=query.subject_type,
            screening_date=state["start_time"],
            adverse_media=AdverseMediaSummary(
                status="FINDINGS" if has_findings(records) else "CLEAR",
                total_articles=len(records),
                categories=count_categories(records),
                articles=records[: self.settings.max_articles_in_response],
            ),
            risk_score=risk.score,
            risk_level=risk.level,
            severity_counts=risk.severity_counts,
            sources_searched={
                outcome.source_name: SourceSummary(
                    count=len(outcome.records),
                    error=outcome.error,
                    status=outcome.status,
                )
                for outcome in state.get("outcomes", [])
            },
            suggested_search_terms=state.get("search_terms", []),
        )

    async def run_workflow(self, query: ScreeningQuery) -> ScreeningResult:
        """
        Run one screening from fan-out to risk score.

        Args:
            query: The validated ScreeningQuery.

        Returns:
            The structured ScreeningResult. Source outages and enrichment
            failures are reported inside it, never raised.

        Raises:
            ValueError: If the query subject is empty.
        """
        logger.info(f"Starting screening workflow for: {query.subject} ({query.subject_type.value})")

        initial_state: ScreeningState = {
            "query": query,
            "search_terms": [],
            "outcomes": [],
            "records": [],
            "risk": None,
            "start_time": datetime.now(timezone.utc),
            "steps_completed": [],
        }

        final_state: ScreeningState = await self.graph.ainvoke(
            initial_state,
            config={
                "tags": ["adverse_media_screening"],
                "metadata": {"subject": query.subject},
            },
        )
        return self.build_result(final_state)
