#!/usr/bin/env python3
"""
Sentiment scoring service
FastAPI application exposing text analysis and per-user history
"""

import os
from datetime import datetime, UTC
from typing import Optional

import uvicorn
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_config
from services.history import HistoryService
from services.llm_adapter import LLMSentimentAnalyzer, SentimentRateLimitError
from services.logging_utils import get_logger, log_extra
from services.observability import elapsed, metrics_router, record_analysis, record_request_metrics, request_timer
from services.security import RequestContext, get_request_context, require_user
from services.sentiment import SentimentResult, SentimentService

# Initialize logger
logger = get_logger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Sentiment Analyzer",
    description="Rule-based and LLM-backed text sentiment scoring",
    version="1.0.0"
)

# Global state
config = get_config()
sentiment_service = SentimentService()
history_service = HistoryService()
_llm_analyzer: Optional[LLMSentimentAnalyzer] = None

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(metrics_router)


def get_llm_analyzer() -> LLMSentimentAnalyzer:
    """Create the OpenAI analyzer on first use"""
    global _llm_analyzer
    if _llm_analyzer is None:
        _llm_analyzer = LLMSentimentAnalyzer()
    return _llm_analyzer


async def run_analysis(text: str) -> SentimentResult:
    """Analyze ``text`` with the configured backend"""
    backend = get_config().active_backend
    if backend == "openai":
        result = await get_llm_analyzer().analyze(text)
    else:
        result = sentiment_service.analyze_sentiment(text)
    record_analysis(backend, result.sentiment)
    return result


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.middleware("http")
async def observe_requests(request: Request, call_next):
    """Record request metrics and echo the request id"""
    start_time = request_timer()
    response = await call_next(request)

    context = getattr(request.state, "request_context", None)
    record_request_metrics(
        request,
        response.status_code,
        elapsed(start_time),
        authenticated=bool(context and context.authenticated),
    )
    if context is not None:
        response.headers[get_config().REQUEST_ID_HEADER] = context.request_id
    return response


@app.post("/api/sentiment")
async def analyze_text(request: Request, context: RequestContext = Depends(get_request_context)):
    """Analyze the sentiment of ``{"text": ...}`` and store it for signed-in users"""
    try:
        body = await request.json()
    except ValueError:
        body = None

    text = body.get("text") if isinstance(body, dict) else None
    if not text or not isinstance(text, str):
        return error_response(400, "Text is required")

    try:
        result = await run_analysis(text)
    except SentimentRateLimitError as e:
        logger.error(f"Error in sentiment analysis API: {e}", extra=log_extra(request_id=context.request_id))
        return error_response(429, str(e))
    except Exception as e:
        logger.error(f"Error in sentiment analysis API: {e}", extra=log_extra(request_id=context.request_id))
        return error_response(500, str(e) or "Failed to analyze sentiment")

    analysis = {
        **result.to_dict(),
        "text": text,
        "timestamp": datetime.now(UTC).isoformat(),
    }

    if context.authenticated:
        history_service.save_analysis(context.user_id, analysis)

    return analysis


@app.get("/api/history")
async def get_history(context: RequestContext = Depends(require_user)):
    """Return the caller's most recent analyses, newest first"""
    try:
        return history_service.get_user_history(context.user_id)
    except Exception as e:
        logger.error(f"Error fetching history: {e}", extra=log_extra(request_id=context.request_id))
        return error_response(500, "Failed to fetch history")


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "ok": True,
        "analyzer": get_config().active_backend,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# Startup event
@app.on_event("startup")
async def startup_event():
    """Log the effective configuration on startup"""
    cfg = get_config()
    if cfg.ANALYZER_BACKEND == "openai" and not cfg.OPENAI_API_KEY:
        logger.warning("ANALYZER_BACKEND=openai but OPENAI_API_KEY is empty; using rule-based analyzer")
    logger.info(f"Starting sentiment service with '{cfg.active_backend}' analyzer")


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("APP_ENV") == "development"
    )
