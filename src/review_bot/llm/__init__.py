from review_bot.llm.client import LLMClient

__all__ = ["LLMClient"]
