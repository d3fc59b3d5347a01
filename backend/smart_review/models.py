from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

MAX_MESSAGE_LENGTH = 10000
MAX_CONTEXT_MESSAGES = 50
MAX_PAGE_SIZE = 100


class Language(str, Enum):
    javascript = "javascript"
    python = "python"
    java = "java"
    csharp = "csharp"
    markup = "markup"
    php = "php"
    ruby = "ruby"
    go = "go"
    typescript = "typescript"


class UserLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    pro = "pro"


# Request bodies are loosely typed on purpose: the routes check each field
# themselves so every failure maps to its own 400 message.
class ReviewRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Any = None
    language: Any = Language.javascript.value
    userLevel: Any = UserLevel.intermediate.value


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Any = None
    context: Any = []


class ChatTurn(BaseModel):
    # no coercion: "yes" or 1 is not a bool, 1 is not text
    model_config = ConfigDict(strict=True)

    content: str
    isUser: bool


class HistoryRecord(BaseModel):
    id: Optional[str] = None
    user_id: str
    code: str
    language: str
    review: str
    user_level: str
    created_at: str


class ReviewResponse(BaseModel):
    success: bool = True
    review: str


class ChatResponse(BaseModel):
    success: bool = True
    response: str


class HistoryPage(BaseModel):
    success: bool = True
    history: List[HistoryRecord]
    page: int
    page_size: int


class HistoryItemResponse(BaseModel):
    success: bool = True
    record: HistoryRecord


class LanguageInfo(BaseModel):
    id: str
    label: str
    template: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
