"""
HTTP API over the retrieval and caching engine.

Handlers are plain (sync) functions, so FastAPI runs the blocking embedding
work in its worker thread pool rather than on the event loop.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .schemas import (
    TextRequest,
    EmbedResponse,
    QueryRequest,
    MatchResponse,
    RetrieveResponse,
    SimilarityRequest,
    SimilarityResponse,
    CacheSearchResponse,
    CacheAddRequest,
    CacheEntryResponse,
    CacheDebugResponse,
    ChatMessageRequest,
    ChatMessageResponse,
    HealthResponse,
    ErrorResponse,
)
from .. import VERSION
from ..core import config
from ..core.engine import RagEngine, build_engine
from ..core.errors import (
    DataIntegrityError,
    InferenceError,
    InitializationError,
    NotInitializedError,
    RagEngineError,
)
from ..core.retrieval_service import similarity_label
from ..core.semantic_cache import CacheHit, ContextAssist
from ..util.logging import logger

_engine: Optional[RagEngine] = None
_init_error: Optional[str] = None


def get_engine() -> RagEngine:
    """Engine shared by all requests, built from configuration on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def set_engine(engine: Optional[RagEngine]) -> None:
    """Replace the shared engine (used by tests and embedding applications)."""
    global _engine, _init_error
    _engine = engine
    _init_error = None


def _initialize_engine() -> None:
    global _init_error
    engine = get_engine()
    seed_path = Path(config.SEED_DATA_PATH)
    if not seed_path.exists():
        logger.warning(f"Seed data not found at {seed_path}; starting with an empty store")
        seed_path = None
    try:
        engine.initialize(seed_path=seed_path)
    except RagEngineError as e:
        _init_error = str(e)
        logger.error(f"Engine initialization failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_in_threadpool(_initialize_engine)
    yield


app = FastAPI(
    title="RAG Engine API",
    version=VERSION,
    description="Embedding, retrieval and semantic cache engine for the RAG demo",
    docs_url="/docs" if config.debug_enabled() else None,
    redoc_url="/redoc" if config.debug_enabled() else None,
    lifespan=lifespan,
)


def _error_response(status_code: int, error_type: str, exc: Exception, details: dict = None) -> JSONResponse:
    body = ErrorResponse(error_type=error_type, message=str(exc), details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(NotInitializedError)
async def not_initialized_handler(request: Request, exc: NotInitializedError):
    details = {"init_error": _init_error} if _init_error else None
    return _error_response(503, "NOT_INITIALIZED", exc, details)


@app.exception_handler(InitializationError)
async def initialization_error_handler(request: Request, exc: InitializationError):
    return _error_response(503, "INITIALIZATION_ERROR", exc)


@app.exception_handler(InferenceError)
async def inference_error_handler(request: Request, exc: InferenceError):
    logger.error(f"Inference failed for {request.url.path}: {exc}")
    return _error_response(500, "INFERENCE_ERROR", exc)


@app.exception_handler(DataIntegrityError)
async def data_integrity_handler(request: Request, exc: DataIntegrityError):
    return _error_response(422, "DATA_INTEGRITY_ERROR", exc, {"expected": exc.expected, "actual": exc.actual})


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(engine: RagEngine = Depends(get_engine)):
    """Report whether the engine finished loading."""
    if engine.is_initialized:
        status = "healthy"
    elif _init_error:
        status = "failed"
    else:
        status = "loading"

    return HealthResponse(
        status=status,
        version=VERSION,
        initialized=engine.is_initialized,
        record_count=engine.vector_store.count(),
        cache_size=len(engine.cache),
    )


@app.post("/embed", response_model=EmbedResponse)
def embed_endpoint(req: TextRequest, engine: RagEngine = Depends(get_engine)):
    embedding = engine.encode(req.text)
    return EmbedResponse(dimension=len(embedding), embedding=embedding.tolist())


@app.post("/retrieve", response_model=RetrieveResponse)
def retrieve_endpoint(req: QueryRequest, engine: RagEngine = Depends(get_engine)):
    result = engine.retrieve(req.query)
    return RetrieveResponse(
        query=result.query,
        matches=[MatchResponse(text=m.text, score=m.score) for m in result.matches],
        answer=engine.format_answer(result),
    )


@app.post("/similarity", response_model=SimilarityResponse)
def similarity_endpoint(req: SimilarityRequest, engine: RagEngine = Depends(get_engine)):
    score = engine.similarity(req.text1, req.text2)
    return SimilarityResponse(score=score, label=similarity_label(score))


@app.post("/cache/search", response_model=CacheSearchResponse)
def cache_search_endpoint(req: QueryRequest, engine: RagEngine = Depends(get_engine)):
    result = engine.cache_search(req.query)
    if isinstance(result, CacheHit):
        return CacheSearchResponse(status="hit", response=result.response, score=result.score)
    if isinstance(result, ContextAssist):
        return CacheSearchResponse(status="assist", context=result.context, score=result.score)
    return CacheSearchResponse(status="miss", score=result.score)


@app.post("/cache", response_model=CacheDebugResponse)
def cache_add_endpoint(req: CacheAddRequest, engine: RagEngine = Depends(get_engine)):
    # Embed server-side unless the caller already has the query vector
    embedding = req.embedding if req.embedding is not None else engine.encode(req.query)
    if len(embedding) != engine.pipeline.dimension:
        raise DataIntegrityError(
            f"Embedding dimension {len(embedding)} does not match model dimension {engine.pipeline.dimension}",
            expected=engine.pipeline.dimension,
            actual=len(embedding),
        )
    engine.cache_add(req.query, embedding, req.response)
    return cache_debug_endpoint(engine)


@app.get("/cache", response_model=CacheDebugResponse)
def cache_debug_endpoint(engine: RagEngine = Depends(get_engine)):
    return CacheDebugResponse(
        capacity=engine.cache.capacity,
        entries=[CacheEntryResponse(query=e.query, response=e.response) for e in engine.cache.get_debug_cache()],
        log_messages=engine.cache.get_log_messages(),
    )


@app.post("/chat", response_model=ChatMessageResponse)
def chat_endpoint(req: ChatMessageRequest, engine: RagEngine = Depends(get_engine)):
    result = engine.send_message(req.message, context_enabled=req.context_enabled)
    return ChatMessageResponse(
        message=result.message,
        context=result.context,
        cache_status=result.cache_status,
        is_completed=result.is_completed,
    )
