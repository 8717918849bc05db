"""Supported languages and their speech/translation identifiers."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Language:
    """A language the session can capture or translate into."""
    code: str
    name: str
    speech_code: str  # Locale handed to the speech recognizer
    translation_name: str  # Label used in LLM prompts


SUPPORTED_LANGUAGES: List[Language] = [
    Language("ja", "日本語", "ja-JP", "Japanese"),
    Language("en", "English", "en-US", "English"),
    Language("zh", "中文", "zh-CN", "Chinese"),
    Language("ko", "한국어", "ko-KR", "Korean"),
    Language("es", "Español", "es-ES", "Spanish"),
    Language("fr", "Français", "fr-FR", "French"),
    Language("de", "Deutsch", "de-DE", "German"),
    Language("it", "Italiano", "it-IT", "Italian"),
    Language("pt", "Português", "pt-BR", "Portuguese"),
    Language("ru", "Русский", "ru-RU", "Russian"),
]


def get_language_by_code(code: str) -> Optional[Language]:
    """Return the language for a code, or None if it is not supported."""
    for language in SUPPORTED_LANGUAGES:
        if language.code == code:
            return language
    return None


def get_language_name(code: str) -> str:
    language = get_language_by_code(code)
    return language.name if language else code
