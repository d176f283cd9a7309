# screening/__init__.py

"""
Adverse media context aggregation service.

Source adapters, the fan-out coordinator, the enrichment pass, risk scoring,
cross-namespace retrieval and the HTTP boundary all reside here.
"""

# No high-level imports are needed here, as components are accessed via their
# specific sub-modules (e.g., screening.graph, screening.sources, screening.retrieval).
