"""Article teaser summaries via Gemini (REST) or Claude (Anthropic SDK)."""

import requests

from ..config import REQUEST_TIMEOUT
from ..errors import ConfigError, ParseError, TransportError
from ..log import get_logger
from ..models import Article
from ..retry import retry_transport
from .base import Summarizer

GEMINI_MODEL = "gemini-2.0-flash"
CLAUDE_MODEL = "claude-sonnet-4-6"
MAX_BODY_CHARS = 12000

# Japanese bullet summary, under 80 characters, written to make people want to read it
PROMPT = (
    "以下の記事を日本語の箇条書きで80字以内で読みたくなるように要約して"
    "（箇条の部分以外で*を使わないで）：\n\n{body}"
)


def build_prompt(article: Article) -> str:
    return PROMPT.format(body=article.body[:MAX_BODY_CHARS])


class GeminiSummarizer(Summarizer):
    name = "gemini"

    def __init__(self, api_key: str, model: str = GEMINI_MODEL, timeout: float = REQUEST_TIMEOUT * 6):
        if not api_key:
            raise ConfigError("GEMINI_API_KEY is not set")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @retry_transport(max_retries=2, base_delay=3.0)
    def summarize(self, article: Article) -> str:
        url = (
            "https://generativelanguage.googleapis.com/v1beta"
            f"/models/{self.model}:generateContent"
        )
        body = {"contents": [{"parts": [{"text": build_prompt(article)}]}]}
        try:
            r = requests.post(
                url, json=body, timeout=self.timeout,
                headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            )
        except requests.RequestException as e:
            raise TransportError(f"Gemini request failed: {e}") from e
        if r.status_code != 200:
            try:
                detail = r.json().get("error", {}).get("message", r.text[:200])
            except Exception:
                detail = r.text[:200]
            raise TransportError(f"Gemini API {r.status_code}: {detail}", r.status_code)

        try:
            data = r.json()
            parts = data.get("candidates", [{}])[0].get("content", {}).get("parts", [])
        except (ValueError, IndexError, AttributeError) as e:
            raise ParseError(f"Unreadable Gemini response: {e}") from e
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
        if not text:
            raise ParseError("No content generated")
        return text


class ClaudeSummarizer(Summarizer):
    name = "claude"

    def __init__(self, api_key: str, model: str = CLAUDE_MODEL):
        if not api_key:
            raise ConfigError("ANTHROPIC_API_KEY is not set")
        import anthropic

        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    @retry_transport(max_retries=2, base_delay=3.0)
    def summarize(self, article: Article) -> str:
        import anthropic

        try:
            msg = self.client.messages.create(
                model=self.model,
                max_tokens=300,
                messages=[{"role": "user", "content": build_prompt(article)}],
            )
        except anthropic.APIError as e:
            raise TransportError(f"Claude request failed: {e}") from e
        text = "".join(
            getattr(block, "text", "") for block in msg.content
        ).strip()
        if not text:
            raise ParseError("No content generated")
        return text


def get_summarizer(settings) -> Summarizer:
    """Gemini when its key is set, otherwise Claude."""
    if settings.gemini_key:
        return GeminiSummarizer(settings.gemini_key)
    if settings.anthropic_key:
        get_logger().debug("GEMINI_API_KEY not set — summarizing with Claude")
        return ClaudeSummarizer(settings.anthropic_key)
    raise ConfigError("Set GEMINI_API_KEY or ANTHROPIC_API_KEY for article summaries")
