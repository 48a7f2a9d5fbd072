"""
Request/response models for the engine HTTP API.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class TextRequest(BaseModel):
    text: str

    @field_validator('text')
    @classmethod
    def text_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('text cannot be empty')
        return v


class EmbedResponse(BaseModel):
    dimension: int
    embedding: List[float]


class QueryRequest(BaseModel):
    query: str

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v


class MatchResponse(BaseModel):
    text: str
    score: float


class RetrieveResponse(BaseModel):
    query: str
    matches: List[MatchResponse]
    answer: str


class SimilarityRequest(BaseModel):
    text1: str
    text2: str


class SimilarityResponse(BaseModel):
    score: float
    label: str


class CacheSearchResponse(BaseModel):
    status: str  # hit|assist|miss
    response: Optional[str] = None
    context: Optional[str] = None
    score: Optional[float] = None


class CacheAddRequest(BaseModel):
    query: str
    response: str
    embedding: Optional[List[float]] = None


class CacheEntryResponse(BaseModel):
    query: str
    response: str


class CacheDebugResponse(BaseModel):
    capacity: int
    entries: List[CacheEntryResponse]
    log_messages: List[str]


class ChatMessageRequest(BaseModel):
    message: str
    context_enabled: bool = True

    @field_validator('message')
    @classmethod
    def message_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('message cannot be empty')
        return v


class ChatMessageResponse(BaseModel):
    message: Optional[str] = None
    context: Optional[str] = None
    cache_status: str
    is_completed: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    initialized: bool
    record_count: int
    cache_size: int


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: datetime = None
    details: Optional[Dict[str, Any]] = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
