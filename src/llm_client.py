"""
Language-model client for the documentation chat.

One call per chat turn: a fixed system instruction plus a single user message
carrying the assembled context. Deterministic sampling, bounded output, no
retries.
"""

import logging
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from .config import Settings
from .errors import UpstreamError, UpstreamTimeoutError
from .token_tracker import tracker

logger = logging.getLogger(__name__)

MAX_TOKENS = 1024
TEMPERATURE = 0
FALLBACK_MESSAGE = "No response generated."

SYSTEM_PROMPT = """\
You are an expert assistant for NEAR Protocol documentation.
Your role is to help developers understand and build on NEAR Protocol based on the official documentation.

## Critical rules
- Answer ONLY using the documents provided inside <search_results>. Do NOT use your training knowledge for technical NEAR questions.
- If the search results do not contain enough information to answer, say so clearly: "I couldn't find documentation about that topic." Suggest related topics if possible.
- NEVER invent function names, API endpoints, SDK methods, or code examples that are not in the provided documents.

## Response guidelines
- Always answer in the same language the user writes in
- Include working code examples when relevant, using the latest NEAR SDK patterns from the docs
- Specify the language/SDK (e.g. near-api-js, near-sdk-rs, near-sdk-js) when showing code

## Formatting
- Use Markdown: headings, code blocks with syntax highlighting, bullet points, and bold for key terms
- When referencing documentation, mention the section name and path
- Keep answers concise but complete; prefer short paragraphs over walls of text

## Scope
- If the question is unrelated to NEAR Protocol, politely redirect the user
- For ambiguous questions, ask for clarification before answering
"""


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0


@dataclass
class Completion:
    text: str
    usage: TokenUsage


class LLMClient:
    def __init__(self, api_key: str, model: str, timeout: float = 60.0):
        self.model = model
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(self, user_content: str) -> Completion:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_content},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except openai.APITimeoutError as e:
            logger.error("Model request timed out: %s", e)
            raise UpstreamTimeoutError("llm", "request timed out") from e
        except openai.OpenAIError as e:
            logger.error("Model request failed: %s", e)
            raise UpstreamError("llm", str(e)) from e

        usage = _usage_from(response.usage)
        tracker.log(
            model=self.model,
            purpose="chat",
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cache_read_tokens=usage.cache_read_tokens,
            cache_creation_tokens=usage.cache_creation_tokens,
        )
        return Completion(text=_first_text(response.choices), usage=usage)

    async def aclose(self) -> None:
        await self._client.close()


def _first_text(choices) -> str:
    for choice in choices or []:
        content = choice.message.content if choice.message else None
        if isinstance(content, str) and content:
            return content
    return FALLBACK_MESSAGE


def _usage_from(usage) -> TokenUsage:
    if usage is None:
        return TokenUsage()
    details = getattr(usage, "prompt_tokens_details", None)
    cached = getattr(details, "cached_tokens", None) if details else None
    return TokenUsage(
        input_tokens=usage.prompt_tokens or 0,
        output_tokens=usage.completion_tokens or 0,
        cache_read_tokens=cached or 0,
        # OpenAI caches prompts automatically and does not report cache writes.
        cache_creation_tokens=0,
    )


def create_llm_client(settings: Settings) -> LLMClient | None:
    """Build the model client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; /api/chat will answer 500 until it is configured")
        return None
    return LLMClient(
        api_key=settings.openai_api_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout_sec,
    )
