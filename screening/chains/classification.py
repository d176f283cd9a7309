from langchain_core.language_models import BaseLanguageModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable

from config.prompts import (
    CLASSIFICATION_SYSTEM_PROMPT,
    CLASSIFICATION_USER_PROMPT,
    NOT_RELEVANT_SENTINEL,
)


def create_classification_chain(llm: BaseLanguageModel) -> Runnable:
    """
    Creates the LangChain Runnable for article classification.

    The chain returns the raw reply text; the JSON array inside it is parsed
    by the classifier, which owns the fallback when parsing fails.

    Args:
        llm: The configured chat model.

    Returns:
        A Runnable taking ``subject``, ``subject_type`` and ``article_list``.
    """
    prompt = ChatPromptTemplate.from_messages(
        [
            ("system", CLASSIFICATION_SYSTEM_PROMPT),
            ("human", CLASSIFICATION_USER_PROMPT),
        ]
    ).partial(not_relevant=NOT_RELEVANT_SENTINEL)

    return (
        prompt
        | llm
        | StrOutputParser()
    ).with_config(tags=["classification_chain"])
