"""Translation and question generation clients."""

from .translation_client import TranslationClient, build_translation_system_prompt
from .question_client import QuestionClient

__all__ = [
    "TranslationClient",
    "build_translation_system_prompt",
    "QuestionClient",
]
