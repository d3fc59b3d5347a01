# smart_review/backend.py
"""
HTTP backend for Smart Code Review.

Endpoints:
- GET  /health
- GET  /languages           -> supported languages and editor starter code
- POST /code-review         -> AI review of pasted code (saved to history when signed in)
- POST /ai-chat             -> programming / learning assistant chat (bearer required)
- GET  /history             -> caller's past reviews, newest first, paginated
- GET  /history/{record_id} -> one past review of the caller

Every error leaves the app as {"success": false, "error": "<message>"}.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Ensure backend/.env is loaded regardless of current working directory
load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from smart_review.auth import has_bearer, optional_bearer, require_bearer, require_user, resolve_user_id
from smart_review.chat.chat import chat_reply
from smart_review.db import HistoryStore, get_history_store, new_record
from smart_review.llm_client import GatewayError
from smart_review.models import (
    MAX_CONTEXT_MESSAGES,
    MAX_MESSAGE_LENGTH,
    MAX_PAGE_SIZE,
    ChatRequest,
    ChatResponse,
    ChatTurn,
    ErrorResponse,
    HistoryItemResponse,
    HistoryPage,
    Language,
    ReviewRequest,
    ReviewResponse,
    UserLevel,
)
from smart_review.review.languages import list_languages
from smart_review.review.review import review_code

# ---------- logging ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("smart-review")

GENERIC_ERROR = "An error occurred processing your request"
BEARER_ONLY_PATHS = {"/ai-chat"}


def _errors(*codes):
    return {code: {"model": ErrorResponse} for code in codes}


# ---------- FastAPI ----------
app = FastAPI(title="Smart Code Review")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"], allow_headers=["*"],
)


# ---------- error envelope ----------
def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):
    # the body is parsed before dependencies run; a missing token still wins
    if request.url.path in BEARER_ONLY_PATHS and not has_bearer(request.headers.get("Authorization")):
        return error_response(401, "Authentication required")
    if any(err.get("loc", ("",))[0] == "query" for err in exc.errors()):
        return error_response(400, "Invalid pagination parameters")
    return error_response(400, "Invalid request body")


@app.exception_handler(GatewayError)
def gateway_exception_handler(request: Request, exc: GatewayError):
    return error_response(exc.status_code, exc.message)


# ---------- helpers ----------
def utf16_length(text: str) -> int:
    """Length as browsers count it: characters outside the BMP count twice."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def validate_review(req: ReviewRequest):
    code = req.code
    if not isinstance(code, str) or not code.strip():
        raise HTTPException(status_code=400, detail="Code is required")
    try:
        language = Language(req.language)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unsupported language")
    try:
        user_level = UserLevel(req.userLevel)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unsupported user level")
    return code, language.value, user_level.value


def validate_chat(req: ChatRequest):
    message = req.message
    if not message or not isinstance(message, str):
        raise HTTPException(status_code=400, detail="Valid message is required")
    if not message.strip():
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    if utf16_length(message) > MAX_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail="Message exceeds maximum length")

    context = req.context
    if not isinstance(context, list) or len(context) > MAX_CONTEXT_MESSAGES:
        raise HTTPException(status_code=400, detail="Invalid context data")
    try:
        turns = [ChatTurn.model_validate(item) for item in context]
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid context data")
    return message, turns


def record_history(store: HistoryStore, token: str, code: str, language: str, review: str, user_level: str):
    """Best effort: a review that reached the user is never failed by history."""
    try:
        user_id = resolve_user_id(token)
        store.save(new_record(user_id, code, language, review, user_level))
    except HTTPException as e:
        logger.info("review not saved to history: %s", e.detail)
    except Exception as e:
        logger.warning("Could not insert history row: %s", e)


# ---------- routes ----------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/languages")
def languages():
    return {"success": True, "languages": [info.model_dump() for info in list_languages()]}


@app.post("/code-review", response_model=ReviewResponse, responses=_errors(400, 402, 429, 500))
def code_review(
    req: ReviewRequest,
    token: Optional[str] = Depends(optional_bearer),
    store: HistoryStore = Depends(get_history_store),
):
    code, language, user_level = validate_review(req)
    try:
        review = review_code(code, language, user_level)
    except GatewayError:
        raise
    except Exception:
        logger.exception("Error in code-review")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    if token:
        record_history(store, token, code, language, review, user_level)
    return ReviewResponse(review=review)


@app.post(
    "/ai-chat",
    response_model=ChatResponse,
    responses=_errors(400, 401, 402, 429, 500),
    dependencies=[Depends(require_bearer)],
)
def ai_chat(req: ChatRequest):
    message, turns = validate_chat(req)
    try:
        response = chat_reply(message, turns)
    except GatewayError:
        raise
    except Exception:
        logger.exception("Error in ai-chat")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)
    return ChatResponse(response=response)


@app.get("/history", response_model=HistoryPage, responses=_errors(400, 401))
def history(
    page: int = 1,
    page_size: int = 20,
    user_id: str = Depends(require_user),
    store: HistoryStore = Depends(get_history_store),
):
    if page < 1 or page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise HTTPException(status_code=400, detail="Invalid pagination parameters")
    records = store.list_for_user(user_id, page=page, page_size=page_size)
    return HistoryPage(history=records, page=page, page_size=page_size)


@app.get("/history/{record_id}", response_model=HistoryItemResponse, responses=_errors(401, 404))
def history_item(
    record_id: str,
    user_id: str = Depends(require_user),
    store: HistoryStore = Depends(get_history_store),
):
    record = store.get_for_user(user_id, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="History record not found")
    return HistoryItemResponse(record=record)
