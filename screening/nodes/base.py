import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Dict

from langchain_core.language_models import BaseLanguageModel
from langchain_core.runnables import Runnable

from config.settings import Settings
from screening.utils.logger import get_logger

logger = get_logger("BaseNode")


class BaseNode(ABC):
    """
    Abstract base class for LLM-driven pipeline steps.
    Handles the timed, logged invocation of a chain.
    """

    def __init__(self, llm: BaseLanguageModel, settings: Settings):
        self.llm = llm
        self.settings = settings

    @abstractmethod
    async def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Execute the step against the pipeline state and return the state update."""

    async def _ainvoke_chain(
        self,
        chain: Runnable,
        input_vars: Dict[str, Any],
        step_name: str,
        timeout: float,
    ) -> Any:
        """
        Invoke ``chain`` asynchronously, bounded by ``timeout`` seconds.

        Raises:
            asyncio.TimeoutError: If the chain did not answer in time.
            Exception: Whatever the provider raised; callers decide the fallback.
        """
        start_time = time.monotonic()
        response = await asyncio.wait_for(chain.ainvoke(input_vars), timeout=timeout)
        duration_ms = (time.monotonic() - start_time) * 1000

        logger.info(
            f"Chain {step_name} answered in {duration_ms:.0f} ms",
            step=step_name,
            latency_ms=round(duration_ms, 1),
            reply_chars=len(str(response)),
        )
        return response
