"""Follow-up question generation over the translated transcript."""

import logging
from typing import AsyncIterator, Optional

from ..llm.chat_client import StreamingChatClient
from ..models.events import TranslationEvent

logger = logging.getLogger(__name__)


class QuestionClient:
    """Generates conference questions from what has been said so far."""

    def __init__(self, chat_client: StreamingChatClient, temperature: float = 0.7):
        self.chat_client = chat_client
        self.temperature = temperature

    @staticmethod
    def build_system_prompt(target_lang: str) -> str:
        return f"""You are an assistant that writes questions to ask at meetings and conferences.
Based on what the user has said (already translated), write questions that would be appropriate to ask.

The questions must:
- be clear and specific
- fit the context of a meeting or conference
- be professional and polite
- be written in {target_lang}
- number between 1 and 3"""

    @staticmethod
    def build_prompt(translated_transcript: str, reference_url: Optional[str], target_lang: str) -> str:
        prompt = f"Here is what I said (translated):\n\n{translated_transcript}"
        if reference_url and reference_url.strip():
            prompt += (
                f"\n\nConference URL: {reference_url.strip()}\n\n"
                "Take the content of this URL into account and generate related questions."
            )
        prompt += f"\n\nBased on the content above, write questions I could ask in {target_lang}."
        return prompt

    async def generate_question(self, translated_transcript: str, reference_url: Optional[str],
                                source_lang: str, target_lang: str) -> AsyncIterator[TranslationEvent]:
        """Stream generated questions for the transcript.

        Raises:
            ValueError: If the transcript is blank
        """
        if not translated_transcript.strip():
            raise ValueError("No translated text provided")

        system_prompt = self.build_system_prompt(target_lang)
        prompt = self.build_prompt(translated_transcript, reference_url, target_lang)

        logger.info(f"Generating question from {len(translated_transcript)} chars ({source_lang} -> {target_lang})")
        async for event in self.chat_client.stream_chat(system_prompt, prompt, self.temperature):
            yield event
