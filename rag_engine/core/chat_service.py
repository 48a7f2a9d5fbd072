"""
Chat orchestration: semantic cache first, then retrieval, then optional local generation.
"""

from dataclasses import dataclass
from typing import Optional

from .llm import ILanguageModel
from .retrieval_service import RetrievalService
from .semantic_cache import CacheHit, ContextAssist, SemanticCache
from ..util.logging import logger

CONTEXT_SEPARATOR = "\n=========\n"


@dataclass
class MessageResult:
    """Answer to a chat message with the context that produced it."""

    message: Optional[str] = None
    context: Optional[str] = None
    cache_status: str = "miss"  # hit|assist|miss
    is_completed: bool = False


def build_prompt(message: str, knowledge_context: Optional[str] = None, cache_context: Optional[str] = None) -> str:
    """Prefix the user message with whatever context is available."""
    sections = []
    if cache_context:
        sections.append(cache_context)
    if knowledge_context:
        sections.append(f"Context from knowledge base: {knowledge_context}")

    if not sections:
        return message
    return "\n".join(sections) + CONTEXT_SEPARATOR + message


class RagChatService:
    """
    Answers messages using the semantic cache, the retrieval service and an optional LLM.

    Every answered message is added to the cache afterwards.
    """

    def __init__(self, retrieval: RetrievalService, cache: SemanticCache,
                 language_model: Optional[ILanguageModel] = None):
        self.retrieval = retrieval
        self.cache = cache
        self.language_model = language_model

    def send_message(self, message: str, context_enabled: bool = True) -> MessageResult:
        embedding = self.retrieval.encode(message)

        cached = self.cache.search_with_embedding(message, embedding)
        if isinstance(cached, CacheHit):
            return MessageResult(message=cached.response, cache_status="hit", is_completed=True)

        cache_context = cached.context if isinstance(cached, ContextAssist) else None
        cache_status = "assist" if cache_context else "miss"

        knowledge_context = None
        if context_enabled:
            result = self.retrieval.retrieve_with_embedding(message, embedding)
            knowledge_context = self.retrieval.format_answer(result)

        if self.language_model is not None:
            prompt = build_prompt(message, knowledge_context, cache_context)
            logger.debug(f"LLM input: {prompt}")
            answer = self.language_model.generate(prompt)
        else:
            # Without a generator the retrieved context is the answer
            answer = knowledge_context if knowledge_context is not None else (cache_context or "")

        self.cache.add_to_cache(message, embedding, answer)

        return MessageResult(
            message=answer,
            context=knowledge_context,
            cache_status=cache_status,
            is_completed=True,
        )
