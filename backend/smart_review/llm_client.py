# smart_review/llm_client.py
import os, logging, requests
from typing import List, Dict
from dotenv import load_dotenv
load_dotenv()

API_KEY = os.getenv("AI_GATEWAY_API_KEY", "").strip()
MODEL = os.getenv("AI_GATEWAY_MODEL", "google/gemini-2.5-flash")
URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")


def read_timeout() -> float:
    """AI_GATEWAY_TIMEOUT in seconds; fractions allowed, as requests takes floats."""
    return float(os.getenv("AI_GATEWAY_TIMEOUT", "60"))


TIMEOUT = read_timeout()

logger = logging.getLogger("llm_client")

RATE_LIMITED_MESSAGE = "Rate limits exceeded, please try again later."
PAYMENT_REQUIRED_MESSAGE = "Payment required, please add funds to your workspace."
GATEWAY_ERROR_MESSAGE = "AI gateway error"


class GatewayError(Exception):
    """Upstream call failed. ``status_code`` is what the client should see."""
    status_code = 500

    def __init__(self, message: str = GATEWAY_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class GatewayNotConfigured(GatewayError):
    pass


class GatewayRateLimited(GatewayError):
    status_code = 429

    def __init__(self, message: str = RATE_LIMITED_MESSAGE):
        super().__init__(message)


class GatewayPaymentRequired(GatewayError):
    status_code = 402

    def __init__(self, message: str = PAYMENT_REQUIRED_MESSAGE):
        super().__init__(message)


def complete(messages: List[Dict[str, str]], timeout: float = TIMEOUT) -> str:
    """
    Send one chat-completions request and return choices[0].message.content.
    Single attempt: upstream failures are mapped to GatewayError subclasses.
    """
    if not API_KEY:
        raise GatewayNotConfigured("AI_GATEWAY_API_KEY is not configured")
    headers = {
        "Authorization": f"Bearer {API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {"model": MODEL, "messages": messages}
    try:
        r = requests.post(URL, headers=headers, json=payload, timeout=timeout)
    except requests.RequestException as e:
        logger.error("AI gateway network error: %s", e)
        raise GatewayError() from e

    if r.status_code == 429:
        raise GatewayRateLimited()
    if r.status_code == 402:
        raise GatewayPaymentRequired()
    if not r.ok:
        logger.error("AI gateway error: %s %s", r.status_code, r.text)
        raise GatewayError()

    try:
        data = r.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.error("AI gateway returned an unexpected body: %s", r.text[:500])
        raise GatewayError() from e
    if not isinstance(content, str):
        logger.error("AI gateway returned non-text content: %r", content)
        raise GatewayError()
    return content
