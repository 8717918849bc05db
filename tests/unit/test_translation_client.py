"""Unit tests for translation and question prompt construction."""

import asyncio
import pytest

from hanasu.models.events import Delta, Done
from hanasu.models.glossary import GlossaryEntry
from hanasu.translation import TranslationClient, QuestionClient, build_translation_system_prompt
from hanasu.translation.translation_client import render_glossary_directives


class RecordingChatClient:
    """Stands in for StreamingChatClient and remembers each prompt."""

    def __init__(self, fragments=("訳",)):
        self.fragments = fragments
        self.calls = []

    async def stream_chat(self, system_prompt, prompt, temperature=0.3):
        self.calls.append({"system": system_prompt, "prompt": prompt, "temperature": temperature})
        for fragment in self.fragments:
            yield Delta(fragment)
        yield Done()


async def collect(stream):
    return [event async for event in stream]


@pytest.mark.unit
class TestTranslationPrompt:

    def test_glossary_directives(self):
        entries = [GlossaryEntry(id="1", term="Acme", replacement="アクメ")]
        assert render_glossary_directives(entries) == (
            "IMPORTANT: Use these custom translations for specific terms:\n"
            '- "Acme" should be translated as "アクメ"'
        )
        assert render_glossary_directives([]) == ""

    def test_system_prompt_names_languages(self):
        prompt = build_translation_system_prompt("English", "Japanese")
        assert prompt.startswith("You are a translator. Translate from English to Japanese.")
        assert "Only output the translated text." in prompt
        assert "IMPORTANT" not in prompt

    def test_system_prompt_appends_glossary(self):
        entries = [GlossaryEntry(id="1", term="Acme", replacement="アクメ")]
        prompt = build_translation_system_prompt("English", "Japanese", entries)
        assert prompt.endswith('- "Acme" should be translated as "アクメ"')


@pytest.mark.unit
class TestTranslationClient:

    def test_translate_streams_events(self):
        chat = RecordingChatClient(fragments=("こん", "にちは"))
        client = TranslationClient(chat)
        entries = [GlossaryEntry(id="1", term="Acme", replacement="アクメ")]

        events = asyncio.run(collect(client.translate("Hello", "English", "Japanese", entries)))

        assert events == [Delta("こん"), Delta("にちは"), Done()]
        assert chat.calls[0]["prompt"] == "Translate this to Japanese:\n\nHello"
        assert "アクメ" in chat.calls[0]["system"]
        assert chat.calls[0]["temperature"] == 0.1

    def test_blank_text_is_an_empty_stream(self):
        chat = RecordingChatClient()
        events = asyncio.run(collect(TranslationClient(chat).translate("   ", "English", "Japanese")))

        assert events == []
        assert chat.calls == []


@pytest.mark.unit
class TestQuestionClient:

    def test_prompt_with_reference_url(self):
        prompt = QuestionClient.build_prompt("Hello everyone", " https://example.com/conf ", "Japanese")
        assert prompt.startswith("Here is what I said (translated):\n\nHello everyone")
        assert "Conference URL: https://example.com/conf" in prompt
        assert prompt.endswith("write questions I could ask in Japanese.")

    def test_prompt_without_reference_url(self):
        prompt = QuestionClient.build_prompt("Hello", None, "English")
        assert "Conference URL" not in prompt

    def test_generate_question_streams(self):
        chat = RecordingChatClient(fragments=("質問1",))
        client = QuestionClient(chat)

        events = asyncio.run(collect(client.generate_question("こんにちは", None, "English", "Japanese")))

        assert events == [Delta("質問1"), Done()]
        assert "written in Japanese" in chat.calls[0]["system"]
        assert chat.calls[0]["temperature"] == 0.7

    def test_blank_transcript_rejected(self):
        client = QuestionClient(RecordingChatClient())
        with pytest.raises(ValueError):
            asyncio.run(collect(client.generate_question("  ", None, "English", "Japanese")))
