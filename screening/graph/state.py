from typing import TypedDict, Optional, List
from datetime import datetime

from screening.models.inputs import ScreeningQuery
from screening.models.outputs import (
    CanonicalRecord,
    RiskAssessment,
    SourceOutcome,
)

# =============================================================================
# State Definition
# =============================================================================

class ScreeningState(TypedDict, total=False):
    """
    The state object for the LangGraph screening pipeline.
    Request-scoped: created per screening, discarded with the result.
    """
    # ------------------------------------
    # 1. Input
    # ------------------------------------
    query: ScreeningQuery

    # ------------------------------------
    # 2. Fan-out
    # ------------------------------------
    search_terms: List[str]
    outcomes: List[SourceOutcome]

    # ------------------------------------
    # 3. Records (combined -> deduplicated -> classified)
    # ------------------------------------
    records: List[CanonicalRecord]

    # ------------------------------------
    # 4. Risk
    # ------------------------------------
    risk: Optional[RiskAssessment]

    # ------------------------------------
    # 5. Metadata / Observability
    # ------------------------------------
    start_time: datetime
    steps_completed: List[str]
