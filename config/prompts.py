"""
LLM prompts for the enrichment pass.

The classification prompt uses XML tags for structured input and asks for a
bare JSON array so the reply can be parsed strictly.
"""

NOT_RELEVANT_SENTINEL = "Not relevant"


# =============================================================================
# Article Classification
# =============================================================================

CLASSIFICATION_SYSTEM_PROMPT = """You are an expert financial-crime analyst performing adverse media screening for compliance teams.

You classify news coverage by the kind of financial crime it reports and by how directly it implicates the screened subject."""

CLASSIFICATION_USER_PROMPT = """<task>
Classify each of the following articles found for the screened subject.
</task>

<subject>
<name>{subject}</name>
<type>{subject_type}</type>
</subject>

<articles>
{article_list}
</articles>

<instructions>
For every article determine:
1. category: one of FINANCIAL_CRIME, CORRUPTION, FRAUD, SANCTIONS_EVASION, MONEY_LAUNDERING, OTHER
2. relevance:
   - HIGH: names the subject directly in a negative context
   - MEDIUM: mentions the subject, possibly in a negative context
   - LOW: tangential or neutral mention
3. summary: one sentence describing the adverse finding, or exactly "{not_relevant}" when the article is not adverse media about the subject
</instructions>

<output_format>
Respond with ONLY a JSON array. Each element:
{{"index": <article number>, "category": "<category>", "relevance": "<relevance>", "summary": "<summary>"}}
Do not include any text outside the JSON array.
</output_format>"""


def format_article_line(index: int, headline: str, source: str, published_date: str) -> str:
    """One numbered article line of the classification prompt."""
    return f'[{index}] "{headline}" - {source} ({published_date or "undated"})'
