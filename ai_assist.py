"""Best-effort reply drafting and thread summaries via the Gemini REST API.

Both operations are single-shot calls with no retry, cache or streaming.
They never raise: every outcome is an :class:`AIResult` whose ``text`` is
always usable, holding a fixed fallback message when the call did not
succeed. Prompts are built by plain interpolation of user content, so a post
can steer the model (prompt injection is not mitigated).
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

import httpx

from config import AI_BASE_URL, AI_MODEL, AI_REPLY_MAX_WORDS, AI_TIMEOUT_SECONDS, GEMINI_API_KEY
from exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

REPLY_UNAVAILABLE = "Unable to reach the AI service (missing API key)"
REPLY_FAILED = "AI reply generation failed, please try again later."
REPLY_EMPTY = "The AI could not come up with a reply..."
SUMMARY_UNAVAILABLE = "Unable to reach the AI service"
SUMMARY_FAILED = "Summary failed"
SUMMARY_EMPTY = "Could not generate a summary"

REPLY_PROMPT = """
You are an experienced member of an online forum. Based on the post below,
write a short, constructive and friendly reply.

Post title: {title}
Post content: {content}

Requirements:
1. Keep the tone relaxed and natural.
2. Stay under {max_words} words.
3. Output the reply text directly, without quotes.
"""

SUMMARY_PROMPT = """
Summarize the key points of the following forum discussion.

Original post: {content}

Comments:
- {comments}

Summarize in 3-5 bullet points.
"""


class AIStatus(str, Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass(slots=True)
class AIResult:
    status: AIStatus
    text: str
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == AIStatus.SUCCESS


class AIAssist:
    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = AI_MODEL,
                 base_url: str = AI_BASE_URL, timeout: float = AI_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def _generate(self, prompt: str) -> str:
        """Send one prompt and return the model text, possibly empty."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"model endpoint returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"request failed: {e.__class__.__name__}") from e
        except ValueError as e:
            raise ExternalServiceError("response was not JSON") from e
        return extract_text(data)

    async def _run(self, prompt: str, unavailable: str, failed: str, empty: str) -> AIResult:
        if not self.available:
            logger.warning("Gemini API key is missing - AI features are disabled")
            return AIResult(AIStatus.UNAVAILABLE, unavailable, "missing API key")
        try:
            text = await self._generate(prompt)
        except ExternalServiceError as e:
            logger.warning("Gemini API error: %s", e)
            return AIResult(AIStatus.FAILED, failed, str(e))
        if not text.strip():
            return AIResult(AIStatus.FAILED, empty, "empty response")
        return AIResult(AIStatus.SUCCESS, text.strip())

    async def generate_reply(self, post_title: str, post_content: str) -> AIResult:
        prompt = REPLY_PROMPT.format(title=post_title, content=post_content, max_words=AI_REPLY_MAX_WORDS)
        return await self._run(prompt, REPLY_UNAVAILABLE, REPLY_FAILED, REPLY_EMPTY)

    async def summarize_thread(self, post_content: str, comment_texts: Sequence[str]) -> AIResult:
        prompt = SUMMARY_PROMPT.format(content=post_content, comments="\n- ".join(comment_texts))
        return await self._run(prompt, SUMMARY_UNAVAILABLE, SUMMARY_FAILED, SUMMARY_EMPTY)


def extract_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate, or "" for any other shape."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
    except (KeyError, IndexError, TypeError):
        return ""
