"""
Configuration module for the adverse media aggregation service.

This module contains:
- settings.py: Environment configuration (credentials, timeouts, caps)
- prompts.py: Prompt templates for the enrichment pass
"""

from config.settings import Settings, LLMProvider, NamespaceBudget, get_settings

__all__ = ["Settings", "LLMProvider", "NamespaceBudget", "get_settings"]
