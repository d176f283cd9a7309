# screening/llm/__init__.py

"""
LLM Management Package.

Builds the chat model used by the enrichment pass.
"""

from .factory import LLMFactory

__all__ = ["LLMFactory"]
