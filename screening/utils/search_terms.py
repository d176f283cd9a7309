# screening/utils/search_terms.py

"""Derivation of the search-term set shared by all sources of a screening."""

from screening.models.inputs import ScreeningQuery, SearchTermSet

COMPLIANCE_KEYWORDS = (
    "sanctions", "fraud", "money laundering", "corruption",
    "indictment", "prosecution", "investigation", "enforcement",
    "penalty", "fine", "settlement", "violation",
)


def build_search_terms(query: ScreeningQuery, keyword_count: int = 4) -> SearchTermSet:
    """
    Build the ordered query-string variants for ``query``.

    Order: the quoted subject, the subject with the first ``keyword_count``
    compliance keywords, the subject with each extra term, then the
    jurisdiction-specific sanctions variant. Sources that consume only a
    prefix therefore always get the broadest queries first.
    """
    base = f'"{query.subject}"'
    terms = [base]
    terms.extend(f"{base} {keyword}" for keyword in COMPLIANCE_KEYWORDS[:keyword_count])
    terms.extend(f"{base} {term}" for term in query.extra_terms)
    if query.jurisdiction_hint:
        terms.append(f"{base} {query.jurisdiction_hint} sanctions")
    return SearchTermSet(subject=query.subject, terms=tuple(terms))
