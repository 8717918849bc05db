"""Request/response shapes of the supported chat providers."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..errors import ConfigurationError, MalformedStreamChunk


def _require_mapping(record: Any) -> Dict[str, Any]:
    if not isinstance(record, dict):
        raise MalformedStreamChunk(f"Expected a JSON object, got {type(record).__name__}")
    return record


def _openai_payload(model: str, system_prompt: str, prompt: str,
                    temperature: float, stream: bool) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        "temperature": temperature,
        "stream": stream,
    }


def _openai_delta(record: Any) -> Optional[str]:
    choices = _require_mapping(record).get("choices") or []
    if not choices:
        return None
    try:
        return (choices[0].get("delta") or {}).get("content")
    except AttributeError as e:
        raise MalformedStreamChunk(f"Unexpected choices shape: {e}")


def _openai_message(data: Any) -> Optional[str]:
    try:
        return _require_mapping(data)["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedStreamChunk(f"Unexpected completion shape: {e}")


def _japan_ai_payload(model: str, system_prompt: str, prompt: str,
                      temperature: float, stream: bool) -> Dict[str, Any]:
    return {
        "prompt": prompt,
        "systemPrompt": system_prompt,
        "model": model,
        "temperature": temperature,
        "stream": stream,
        "agentName": "",
    }


def _japan_ai_delta(record: Any) -> Optional[str]:
    record = _require_mapping(record)
    if record.get("type") != "delta":
        return None
    delta = record.get("delta")
    if not isinstance(delta, dict):
        raise MalformedStreamChunk("Delta record without a delta object")
    if delta.get("type") != "text":
        return None
    return delta.get("text")


def _japan_ai_message(data: Any) -> Optional[str]:
    return _require_mapping(data).get("chatMessage")


@dataclass(frozen=True)
class ChatProvider:
    """How to talk to one upstream chat API."""
    name: str
    default_url: str
    url_path: str
    build_payload: Callable[..., Dict[str, Any]]
    extract_delta: Callable[[Any], Optional[str]]
    extract_message: Callable[[Any], Optional[str]]

    def endpoint(self, base_url: Optional[str] = None) -> str:
        if not base_url:
            return self.default_url
        return base_url.rstrip("/") + self.url_path


PROVIDERS: Dict[str, ChatProvider] = {
    "openai": ChatProvider(
        name="openai",
        default_url="https://api.openai.com/v1/chat/completions",
        url_path="/chat/completions",
        build_payload=_openai_payload,
        extract_delta=_openai_delta,
        extract_message=_openai_message,
    ),
    "japan_ai": ChatProvider(
        name="japan_ai",
        default_url="https://api.japan-ai.co.jp/chat/v2",
        url_path="/chat/v2",
        build_payload=_japan_ai_payload,
        extract_delta=_japan_ai_delta,
        extract_message=_japan_ai_message,
    ),
}


def get_provider(name: str) -> ChatProvider:
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown LLM provider '{name}' (expected one of: {', '.join(sorted(PROVIDERS))})"
        )
