"""
Semantic cache of recent query/response pairs.
Maintains the last few conversations and matches new queries by embedding similarity.
"""

from dataclasses import dataclass
import threading
from typing import List, Optional
import numpy as np

from ..vector.embeddings import EmbeddingPipeline
from ..vector.similarity import cosine_similarity
from ..vector.types import EmbeddingVector, VectorLike, as_vector
from ..util.logging import logger, shorten

MAX_CACHE_SIZE = 5
HIGH_SIMILARITY_THRESHOLD = 0.95
MEDIUM_SIMILARITY_THRESHOLD = 0.60
MAX_LOG_MESSAGES = 100


class CacheEntry:
    """
    An entry in the semantic cache.

    Equality and hashing compare the embedding's raw float bits, not identity,
    so 0.0 and -0.0 are distinct and equal entries always hash alike.
    The entry keeps its own read-only copy of the embedding.
    """

    def __init__(self, query: str, query_embedding: VectorLike, response: str):
        self.query = query
        self.query_embedding = np.array(query_embedding, dtype=np.float32).reshape(-1)
        self.query_embedding.flags.writeable = False
        self.response = response

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, CacheEntry):
            return NotImplemented
        return (self.query == other.query
                and self.response == other.response
                and self.query_embedding.tobytes() == other.query_embedding.tobytes())

    def __hash__(self):
        return hash((self.query, self.query_embedding.tobytes(), self.response))

    def __repr__(self):
        return f"CacheEntry(query={self.query!r}, dim={len(self.query_embedding)}, response={shorten(self.response, 20)!r})"


class CacheResult:
    """Outcome of a cache lookup: NoMatch, ContextAssist or CacheHit."""


@dataclass
class NoMatch(CacheResult):
    score: Optional[float] = None


@dataclass
class ContextAssist(CacheResult):
    """A related earlier exchange, to be fed to generation as extra context."""

    context: str
    score: Optional[float] = None


@dataclass
class CacheHit(CacheResult):
    """A near-identical earlier query; the cached response is reused verbatim."""

    response: str
    score: Optional[float] = None


def build_assist_context(query: str, response: str) -> str:
    return f"Previously, a similar question was asked: \"{query}\". The answer was: \"{response}\""


class SemanticCache:
    """
    Bounded FIFO of past exchanges with hybrid hit/assist/miss decisioning.

    Lookups and insertions are guarded by a lock so the entry list can be
    shared between concurrent request handlers.
    """

    def __init__(self, pipeline: EmbeddingPipeline, capacity: int = MAX_CACHE_SIZE,
                 high_threshold: float = HIGH_SIMILARITY_THRESHOLD,
                 medium_threshold: float = MEDIUM_SIMILARITY_THRESHOLD):
        if capacity < 1:
            raise ValueError("Cache capacity must be >= 1")
        if medium_threshold >= high_threshold:
            raise ValueError("Medium threshold must be lower than high threshold")

        self.pipeline = pipeline
        self.capacity = capacity
        self.high_threshold = high_threshold
        self.medium_threshold = medium_threshold
        self._entries: List[CacheEntry] = []
        self._log_messages: List[str] = []
        self._lock = threading.Lock()
        # Separate lock so log lines can be recorded while _lock is held
        self._log_lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def _is_empty(self) -> bool:
        with self._lock:
            return not self._entries

    def _record(self, message: str) -> None:
        with self._log_lock:
            self._log_messages.append(message)
            if len(self._log_messages) > MAX_LOG_MESSAGES:
                del self._log_messages[:-MAX_LOG_MESSAGES]
        logger.debug(message)

    def search(self, query: str) -> CacheResult:
        """Embed the query and classify it against the cached entries."""
        self._record(f"cacheQuery: {{\"{shorten(query, 20)}\"}}")

        # Nothing to compare against, skip the embedding work
        if self._is_empty():
            logger.log_cache_event("miss", query, details={"reason": "empty"})
            return NoMatch()

        embedding = self.pipeline.encode(query)
        return self._classify(query, embedding)

    def search_with_embedding(self, query: str, embedding: VectorLike) -> CacheResult:
        """Classify a query whose embedding is already known."""
        self._record(f"cacheQuery: {{\"{shorten(query, 20)}\"}}")
        if self._is_empty():
            logger.log_cache_event("miss", query, details={"reason": "empty"})
            return NoMatch()
        return self._classify(query, as_vector(embedding))

    def _classify(self, query: str, embedding: EmbeddingVector) -> CacheResult:
        with self._lock:
            best_match = None
            highest_score = float("-inf")
            for entry in self._entries:
                score = cosine_similarity(embedding, entry.query_embedding)
                # Strict comparison: the earliest entry wins ties
                if score > highest_score:
                    highest_score = score
                    best_match = entry

        if best_match is None:
            return NoMatch()

        if highest_score > self.high_threshold:
            self._record(f"cacheHit: {{\"{shorten(best_match.query, 20)}\"}} (score: {highest_score})")
            logger.log_cache_event("hit", query, highest_score, {"matched": shorten(best_match.query, 20)})
            return CacheHit(response=best_match.response, score=highest_score)

        if highest_score > self.medium_threshold:
            self._record(f"cacheAssist: {{\"{shorten(best_match.query, 20)}\"}} (score: {highest_score})")
            logger.log_cache_event("assist", query, highest_score, {"matched": shorten(best_match.query, 20)})
            return ContextAssist(context=build_assist_context(best_match.query, best_match.response),
                                 score=highest_score)

        self._record(f"cacheMiss: No similar queries found (best score: {highest_score})")
        logger.log_cache_event("miss", query, highest_score)
        return NoMatch(score=highest_score)

    def add_to_cache(self, query: str, query_embedding: VectorLike, response: str) -> None:
        """Store an answered query, evicting the oldest entry when full."""
        entry = CacheEntry(query, query_embedding, response)

        with self._lock:
            if len(self._entries) >= self.capacity:
                removed = self._entries.pop(0)
                self._record(f"Removed from cache: \"{removed.query}\"")
                logger.log_cache_event("evict", removed.query)

            self._entries.append(entry)
            size = len(self._entries)

        self._record(f"storedMem: {{\"{query}\"}}")
        self._record(f"Response preview: {shorten(response, 50)}")
        logger.log_cache_event("store", query, details={"size": f"{size}/{self.capacity}"})

    def get_debug_cache(self) -> List[CacheEntry]:
        """Copy of the current entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def get_log_messages(self) -> List[str]:
        """Recent human-readable cache log lines."""
        with self._log_lock:
            return list(self._log_messages)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
