"""Extract glossary keywords (speakers, companies, products, terms) from a web page."""

import asyncio
import json
import re
import logging
from typing import Any, List

import aiohttp

from ..errors import KeywordExtractionError, UpstreamError
from ..llm.chat_client import StreamingChatClient
from ..models.glossary import GlossaryEntry, WILDCARD

logger = logging.getLogger(__name__)

MAX_PAGE_CHARS = 20000

_HTML_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
}


def html_to_text(html: str) -> str:
    """Strip scripts, styles, comments and tags, then collapse whitespace."""
    text = re.sub(r"<script[^>]*>[\s\S]*?</script>", "", html, flags=re.IGNORECASE)
    text = re.sub(r"<style[^>]*>[\s\S]*?</style>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"<!--[\s\S]*?-->", "", text)
    text = re.sub(r"<[^>]+>", " ", text)
    for entity, char in _HTML_ENTITIES.items():
        text = text.replace(entity, char)
    return re.sub(r"\s+", " ", text).strip()


def parse_keyword_reply(content: str) -> List[dict]:
    """Parse the model's JSON reply, tolerating code fences and surrounding prose."""
    cleaned = content.strip()

    fenced = re.search(r"```(?:json)?\s*(\{[\s\S]*\})\s*```", cleaned)
    if fenced:
        cleaned = fenced.group(1)

    braces = re.search(r"(\{[\s\S]*\})", cleaned)
    if braces:
        cleaned = braces.group(1)

    try:
        parsed: Any = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise KeywordExtractionError(f"Failed to parse AI response: {e}")

    if isinstance(parsed, dict):
        keywords = parsed.get("keywords") or []
    else:
        keywords = parsed if isinstance(parsed, list) else []
    return [k for k in keywords if isinstance(k, dict) and k.get("term")]


class KeywordExtractor:
    """Builds glossary drafts from a conference or event page."""

    SYSTEM_PROMPT = "Extract keywords from text and return them as JSON."

    def __init__(self, chat_client: StreamingChatClient):
        self.chat_client = chat_client

    async def fetch_page_text(self, url: str) -> str:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30)) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise KeywordExtractionError(f"Failed to fetch URL: {response.status} {response.reason}")
                    html = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise KeywordExtractionError(f"Failed to fetch URL: {e!r}") from e

        text = html_to_text(html)[:MAX_PAGE_CHARS]
        if not text:
            raise KeywordExtractionError("No text content found on the page")
        return text

    @staticmethod
    def build_prompt(text: str) -> str:
        return f"""Extract speaker names, company names, product names, and technical terms from this text.

Return JSON in this format:
{{"keywords":[{{"term":"example","translation":"example","category":"speaker"}}]}}

Text:
{text}"""

    async def extract_from_url(self, url: str, source_lang: str = WILDCARD,
                               target_lang: str = WILDCARD) -> List[GlossaryEntry]:
        """Return unsaved glossary drafts extracted from the page at `url`.

        Raises:
            KeywordExtractionError: If the page or the model reply is unusable
        """
        text = await self.fetch_page_text(url)
        logger.info(f"Extracting keywords from {url} ({len(text)} chars)")

        try:
            content = await self.chat_client.complete(self.SYSTEM_PROMPT, self.build_prompt(text), temperature=0.1)
        except UpstreamError as e:
            raise KeywordExtractionError(f"AI extraction failed: {e}") from e

        keywords = parse_keyword_reply(content)
        if not keywords:
            raise KeywordExtractionError("No keywords found in the content")

        logger.info(f"Extracted {len(keywords)} keywords from {url}")
        return [
            GlossaryEntry(
                id="",
                term=str(k["term"]),
                replacement=str(k.get("translation") or k.get("replacement") or k["term"]),
                source_lang=source_lang,
                target_lang=target_lang,
            )
            for k in keywords
        ]
