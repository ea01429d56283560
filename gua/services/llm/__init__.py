"""LLM provider factory."""

from gua.core.config import settings
from gua.services.llm.base import BaseUpstreamProvider


def get_llm_provider() -> BaseUpstreamProvider:
    """Factory function that returns the configured upstream completion provider."""
    if settings.llm_provider == "deepseek":
        from gua.services.llm.deepseek import DeepSeekProvider
        return DeepSeekProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
