from typing import List

from smart_review.llm_client import complete
from smart_review.models import ChatTurn

PERSONA = """You are a helpful AI assistant specializing in programming, education, and career roadmaps.
You provide clear, concise, and actionable advice. You can help with:
- Programming concepts and debugging
- Learning paths and educational resources
- Career development and technology roadmaps
- Best practices and coding standards

Be friendly, supportive, and informative."""


def build_chat_messages(message: str, context: List[ChatTurn]):
    messages = [{"role": "system", "content": PERSONA}]
    for turn in context:
        messages.append({
            "role": "user" if turn.isUser else "assistant",
            "content": turn.content,
        })
    messages.append({"role": "user", "content": message})
    return messages


def chat_reply(message: str, context: List[ChatTurn]) -> str:
    return complete(build_chat_messages(message, context))
