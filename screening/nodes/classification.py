# screening/nodes/classification.py

"""
Relevance/Credibility Classifier.

Optional, best-effort enrichment pass: a bounded prefix of the records is
sent to a generative model which assigns category, relevance and a one-line
summary per article. Whatever goes wrong (no credential, timeout, provider
error, unparseable reply) the records come back with their prior
classification, and nothing is raised.
"""

import json
from typing import Any, Dict, Optional, Sequence

from langchain_core.language_models import BaseLanguageModel
from pydantic import ValidationError

from config.prompts import NOT_RELEVANT_SENTINEL, format_article_line
from config.settings import Settings
from screening.chains.classification import create_classification_chain
from screening.models.outputs import CanonicalRecord, Category, Relevance
from screening.models.schemas import ClassificationPatch
from screening.nodes.base import BaseNode
from screening.utils.logger import get_logger

logger = get_logger("ClassificationNode")

_decoder = json.JSONDecoder()


def parse_classification_reply(text: str) -> Optional[list[ClassificationPatch]]:
    """
    Strictly parse the patch array embedded in a model reply.

    Each bracket position is tried in order. The first JSON array holding at
    least one valid patch wins, so bracketed prose such as ``Article [0]``
    ahead of the real array is passed over. Elements that are not valid
    patches are skipped.

    Returns:
        The list of patches; an empty list when arrays were found but none
        held a valid patch; None when the reply holds no JSON array.
    """
    if not text:
        return None

    found_array = False
    position = text.find("[")
    while position != -1:
        try:
            value, _ = _decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list):
            found_array = True
            patches = []
            for element in value:
                try:
                    patches.append(ClassificationPatch.model_validate(element))
                except ValidationError:
                    continue
            if patches:
                return patches
        position = text.find("[", position + 1)
    return [] if found_array else None


def _coerce(enum_cls, value: Optional[str]):
    if not value or not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return None


def apply_patches(
    records: Sequence[CanonicalRecord],
    patches: Sequence[ClassificationPatch],
    batch_size: int,
) -> list[CanonicalRecord]:
    """
    Overlay ``patches`` onto the first ``batch_size`` records by index.

    Out-of-range indices and unrecognised values are ignored. A summary is
    only replaced by an explicit adverse finding, never by the "not
    relevant" sentinel or an empty string.
    """
    patched = list(records)
    limit = min(batch_size, len(records))
    for patch in patches:
        if not 0 <= patch.index < limit:
            continue
        update: Dict[str, Any] = {}
        category = _coerce(Category, patch.category)
        if category is not None:
            update["category"] = category
        relevance = _coerce(Relevance, patch.relevance)
        if relevance is not None:
            update["relevance"] = relevance
        summary = (patch.summary or "").strip()
        if summary and summary.lower() != NOT_RELEVANT_SENTINEL.lower():
            update["summary"] = summary
        if update:
            patched[patch.index] = patched[patch.index].model_copy(update=update)
    return patched


class RelevanceClassifier(BaseNode):
    """
    Enriches canonical records with category/relevance labels.

    ``llm`` may be None, in which case the classifier is a passthrough.
    """

    def __init__(self, llm: Optional[BaseLanguageModel], settings: Settings):
        super().__init__(llm, settings)
        self.batch_size = settings.enrichment_batch_size
        self.chain = create_classification_chain(llm) if llm is not None else None

    @property
    def enabled(self) -> bool:
        return self.chain is not None

    async def classify(
        self,
        subject: str,
        subject_type: str,
        records: Sequence[CanonicalRecord],
    ) -> list[CanonicalRecord]:
        """
        Return ``records`` with enrichment applied to the first batch.

        Same length and order as the input; the input records are not
        mutated. Records beyond the batch cap keep their classification.
        """
        records = list(records)
        if not self.enabled or not records:
            return records

        batch = records[: self.batch_size]
        prompt_vars = {
            "subject": subject,
            "subject_type": getattr(subject_type, "value", subject_type),
            "article_list": "\n".join(
                format_article_line(i, r.headline, r.source_name, r.published_date)
                for i, r in enumerate(batch)
            ),
        }

        try:
            reply = await self._ainvoke_chain(
                self.chain,
                prompt_vars,
                step_name="article_classification",
                timeout=self.settings.enrichment_timeout,
            )
        except Exception as e:
            logger.warning(
                f"Enrichment call failed, keeping unenriched records: {e.__class__.__name__}: {e}"
            )
            return records

        patches = parse_classification_reply(reply if isinstance(reply, str) else str(reply))
        if patches is None:
            logger.warning("Enrichment reply held no JSON array; keeping unenriched records.")
            return records

        logger.info(f"Applying {len(patches)} classification patches to {len(batch)} records.")
        return apply_patches(records, patches, self.batch_size)

    async def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Running Classification Node...")
        query = state["query"]
        records = await self.classify(query.subject, query.subject_type, state["records"])
        return {
            "records": records,
            "steps_completed": state.get("steps_completed", []) + ["classify"],
        }
