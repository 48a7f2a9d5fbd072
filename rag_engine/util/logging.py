"""
Structured logging for embedding, retrieval and cache operations.
"""

import logging
import os
from typing import Any, Dict


def shorten(text: str, limit: int) -> str:
    """Truncate text for log output, marking the cut with an ellipsis."""
    if text is None:
        return ""
    return text[:limit] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for engine operations."""

    def __init__(self, name: str = "rag_engine"):
        self.logger = logging.getLogger(name)
        debug = os.getenv("DEBUG", "false").lower() == "true"
        self.logger.setLevel(logging.DEBUG if debug else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status == "degraded":
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_embedding_operation(self, operation: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a model/tokenizer operation."""
        self.log_operation(f"embedding.{operation}", status, details)

    def log_vector_operation(self, operation: str, record_count: int, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector store operation."""
        log_details = {"record_count": record_count}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_retrieval(self, query: str, match_count: int, top_score: float = None, status: str = "success"):
        """Log a retrieval request."""
        log_details = {"query": shorten(query, 50), "match_count": match_count}
        if top_score is not None:
            log_details["top_score"] = round(float(top_score), 4)

        self.log_operation("retrieval.query", status, log_details)

    def log_cache_event(self, event: str, query: str, score: float = None, details: Dict[str, Any] = None):
        """Log a semantic cache event (query, hit, assist, miss, store, evict)."""
        log_details = {"query": shorten(query, 20)}
        if score is not None:
            log_details["score"] = round(float(score), 4)
        if details:
            log_details.update(details)

        self.log_operation(f"cache.{event}", "success", log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
