"""Streaming translation of recognized text fragments."""

import logging
from typing import AsyncIterator, Iterable, Sequence

from ..llm.chat_client import StreamingChatClient
from ..models.events import TranslationEvent
from ..models.glossary import GlossaryEntry

logger = logging.getLogger(__name__)


def render_glossary_directives(entries: Sequence[GlossaryEntry]) -> str:
    """Render glossary entries as prompt instructions ("" when there are none)."""
    if not entries:
        return ""
    lines = "\n".join(
        f'- "{entry.term}" should be translated as "{entry.replacement}"' for entry in entries
    )
    return f"IMPORTANT: Use these custom translations for specific terms:\n{lines}"


def build_translation_system_prompt(source_lang: str, target_lang: str,
                                    entries: Sequence[GlossaryEntry] = ()) -> str:
    prompt = f"""You are a translator. Translate from {source_lang} to {target_lang}.

Example:
Input: "Hello, how are you?"
Output: "こんにちは、お元気ですか?"

Input: "The weather is nice today."
Output: "今日は天気がいいですね。"

Only output the translated text. Do not add summaries, findings, analysis, or explanations."""

    directives = render_glossary_directives(entries)
    if directives:
        prompt += f"\n\n{directives}"
    return prompt


class TranslationClient:
    """Translates text fragments into a stream of Delta/Done/Failed events."""

    def __init__(self, chat_client: StreamingChatClient, temperature: float = 0.1):
        self.chat_client = chat_client
        self.temperature = temperature

    async def translate(self, text: str, source_lang: str, target_lang: str,
                        glossary_entries: Iterable[GlossaryEntry] = ()) -> AsyncIterator[TranslationEvent]:
        """Translate `text` from one language label to another.

        Args:
            text: Source text; blank text yields an empty stream
            source_lang: Source language label (e.g. "English")
            target_lang: Target language label (e.g. "Japanese")
            glossary_entries: Forced term translations for this language pair
        """
        if not text.strip():
            logger.debug("Skipping translation of blank text")
            return

        entries = list(glossary_entries)
        system_prompt = build_translation_system_prompt(source_lang, target_lang, entries)
        prompt = f"Translate this to {target_lang}:\n\n{text}"

        logger.debug(f"Starting streaming translation ({len(entries)} keywords): {text!r}")
        async for event in self.chat_client.stream_chat(system_prompt, prompt, self.temperature):
            yield event
