"""Google Speech-to-Text streaming recognizer with interim results."""

import os
import queue
import logging
from threading import Thread, Event
from typing import Any, Iterator, Optional

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from ..audio.capture import AudioCapture
from ..models.events import AudioEvent, RecognitionEvent, RecognitionResult
from .base import AbstractSpeechRecognizer, AUDIO_CAPTURE, NETWORK, NO_SPEECH, NOT_ALLOWED

logger = logging.getLogger(__name__)


class GoogleStreamingRecognizer(AbstractSpeechRecognizer):
    """Microphone audio streamed to Google Cloud with interim results enabled.

    Google closes a streaming call after a few minutes; that surfaces as
    `on_end` and the session controller restarts recognition.
    """

    name = "google"

    def __init__(self,
                 locale: str,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 model: str = "latest_long",
                 enable_automatic_punctuation: bool = True):
        """Initialize Google streaming recognizer.

        Args:
            locale: Speech locale (e.g. 'en-US', 'ja-JP')
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Microphone sample rate
            model: Recognition model name
            enable_automatic_punctuation: Enable automatic punctuation
        """
        super().__init__(locale)
        if not credentials_path:
            raise ValueError("Google credentials path is required - cannot initialize without credentials")
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self.client: Optional[speech.SpeechClient] = None
        self.recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate,
            language_code=locale,
            enable_automatic_punctuation=enable_automatic_punctuation,
            model=model,
        )

        self._audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._capture: Optional[AudioCapture] = None
        self._worker: Optional[Thread] = None
        self._stop_event = Event()

    @classmethod
    def is_available(cls, config: Any = None) -> bool:
        if config is None:
            return False
        credentials_path = config.get('speech.google_cloud.credentials_path')
        return bool(credentials_path) and os.path.exists(credentials_path)

    @classmethod
    def create(cls, locale: str, config: Any = None) -> "GoogleStreamingRecognizer":
        return cls(
            locale,
            credentials_path=config.get('speech.google_cloud.credentials_path'),
            sample_rate=config.get('speech.sample_rate', 16000),
            model=config.get('speech.google_cloud.model', 'latest_long'),
        )

    def _ensure_client(self) -> speech.SpeechClient:
        if self.client is None:
            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            self.client = speech.SpeechClient(credentials=credentials)
            logger.info(f"Using Google Cloud project: {credentials.project_id}")
        return self.client

    def start(self) -> None:
        self._bind_loop()
        self._ensure_client()

        self._stop_event.clear()
        self._audio_queue = queue.Queue()
        self._capture = AudioCapture(
            callback=self._on_audio,
            error_callback=self._on_capture_error,
            sample_rate=self.sample_rate,
        )
        self._capture.start_recording()

        self._worker = Thread(target=self._recognize_stream, args=(self._capture, self._audio_queue), daemon=True)
        self._worker.name = "GoogleStreamingThread"
        self._dispatch("on_start")
        self._worker.start()

    def stop(self) -> None:
        self._stop_event.set()
        self._audio_queue.put(None)
        if self._capture:
            self._capture.stop_recording()
        if self._worker and self._worker.is_alive():
            self._worker.join(timeout=2.0)
            if self._worker.is_alive():
                logger.warning("Streaming thread did not stop cleanly")

    def _on_audio(self, event: AudioEvent) -> None:
        self._audio_queue.put(event.audio_data)

    def _on_capture_error(self, error: Exception) -> None:
        self._dispatch("on_error", AUDIO_CAPTURE, str(error))
        self._audio_queue.put(None)

    def _audio_requests(self, audio_queue: "queue.Queue[Optional[bytes]]") -> Iterator[speech.StreamingRecognizeRequest]:
        while not self._stop_event.is_set():
            chunk = audio_queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    @staticmethod
    def to_recognition_event(response: Any) -> Optional[RecognitionEvent]:
        """Convert a StreamingRecognizeResponse into a RecognitionEvent."""
        results = [
            RecognitionResult(
                is_final=result.is_final,
                alternatives=[alternative.transcript for alternative in result.alternatives],
            )
            for result in response.results
            if result.alternatives
        ]
        if not results:
            return None
        return RecognitionEvent(results=results, result_index=0)

    def _recognize_stream(self, capture: AudioCapture, audio_queue: "queue.Queue[Optional[bytes]]") -> None:
        """Internal method: run one streaming call on a background thread."""
        streaming_config = speech.StreamingRecognitionConfig(
            config=self.recognition_config,
            interim_results=True,
        )
        try:
            responses = self.client.streaming_recognize(
                config=streaming_config,
                requests=self._audio_requests(audio_queue),
            )
            for response in responses:
                if self._stop_event.is_set():
                    break
                event = self.to_recognition_event(response)
                if event is not None:
                    self._dispatch("on_result", event)
        except (gax_exceptions.PermissionDenied, gax_exceptions.Unauthenticated) as e:
            logger.error(f"Google STT access denied: {e}")
            self._dispatch("on_error", NOT_ALLOWED, str(e))
        except gax_exceptions.OutOfRange as e:
            logger.info(f"Google STT stream limit reached: {e}")
        except gax_exceptions.DeadlineExceeded as e:
            logger.debug(f"Google STT deadline exceeded: {e}")
            self._dispatch("on_error", NO_SPEECH, str(e))
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT API call error: {e}")
            self._dispatch("on_error", NETWORK, str(e))
        finally:
            capture.stop_recording()
            self._dispatch("on_end")
