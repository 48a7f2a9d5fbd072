"""
Error taxonomy for the retrieval engine.
Initialization failures are fatal to a session; inference failures are per call.
"""


class RagEngineError(Exception):
    """Base class for all engine errors."""


class InitializationError(RagEngineError):
    """Tokenizer, model, vector store or seed data failed to load."""


class NotInitializedError(RagEngineError):
    """An operation was invoked before initialization completed."""


# Name used by callers that think in terms of the model adapter
ModelNotInitialized = NotInitializedError


class InferenceError(RagEngineError):
    """A single encode call failed inside the model adapter."""


class TokenizationError(InferenceError):
    """The tokenizer rejected or failed on the input text."""


class DataIntegrityError(RagEngineError):
    """Embedding dimensionality does not match the active model configuration."""

    def __init__(self, message: str, expected: int = None, actual: int = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
