"""Session controller: owns the capture lifecycle, the transcript log and translation dispatch."""

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, List, Optional

from ..errors import (
    CapabilityUnavailable,
    ConfigurationError,
    HanasuError,
    InvalidSessionOperation,
    PermissionDenied,
)
from ..glossary.glossary import KeywordGlossary
from ..languages import Language, get_language_by_code
from ..models.events import Delta, Done, Failed, RecognitionEvent, TranslationEvent
from ..models.glossary import GlossaryEntry
from ..models.session import LanguagePair, SessionState, SessionStatus
from ..models.transcript import LogEntry, TRANSLATION_ERROR_MARKER
from ..speech.base import AbstractSpeechRecognizer, PERMISSION_ERRORS, RECOVERABLE_ERRORS
from .publisher import SessionPublisher
from .transcript_log import TranscriptLog

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = (
    "Microphone access was denied. Allow microphone access and start the session again."
)


@dataclass
class TranslationRequest:
    """One dispatched translation of an entry's text."""
    token: int
    entry_id: str
    text: str
    is_terminal: bool  # translating recognizer-final text
    glossary_entries: List[GlossaryEntry] = field(default_factory=list)
    accumulated: str = ""
    task: Optional[asyncio.Task] = None


class SessionController:
    """Drives one live translation session on the running asyncio loop.

    Recognizer callbacks, debounce timers and translation events all run
    on the same loop, so handlers are plain methods that never block.
    """

    DEFAULT_DEBOUNCE_SECONDS = 0.3

    def __init__(self,
                 translation_client,
                 glossary: KeywordGlossary,
                 recognizer_factory: Callable[[str], AbstractSpeechRecognizer],
                 language_pair: LanguagePair,
                 transcript_log: Optional[TranscriptLog] = None,
                 publisher: Optional[SessionPublisher] = None,
                 question_client=None,
                 debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        """Initialize session controller.

        Args:
            translation_client: Object with an async-generator `translate()` method
            glossary: Keyword glossary applied to recognized text
            recognizer_factory: Builds a recognizer for a speech locale
                (raises CapabilityUnavailable when none can run)
            language_pair: Initial source/target language codes
            transcript_log: Log to record entries in (a new one by default)
            publisher: Fan-out for status and entry changes
            question_client: Optional client for follow-up question generation
            debounce_seconds: Quiet period before an interim fragment is translated
        """
        self.translation_client = translation_client
        self.glossary = glossary
        self.recognizer_factory = recognizer_factory
        self.log = transcript_log if transcript_log is not None else TranscriptLog()
        self.publisher = publisher or SessionPublisher()
        self.question_client = question_client
        self.debounce_seconds = debounce_seconds

        self.state = SessionState(language_pair=language_pair)
        self.last_error: Optional[HanasuError] = None

        self._recognizer: Optional[AbstractSpeechRecognizer] = None
        self._wants_capture = False
        self._source: Optional[Language] = None
        self._target: Optional[Language] = None

        self._entry_sequence = itertools.count(1)
        self._token_sequence = itertools.count(1)
        self._debounce_generation = 0
        self._latest_token: Dict[str, int] = {}
        self._inflight: Dict[int, TranslationRequest] = {}

        logger.info(f"SessionController initialized: {language_pair.source} -> {language_pair.target}")

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_capturing(self) -> bool:
        return self._wants_capture

    @property
    def pending_translations(self) -> int:
        return len(self._inflight)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin continuous capture. Must be called from the running event loop.

        Raises:
            InvalidSessionOperation: If a session is already running
            ConfigurationError: If the language pair is not supported
            CapabilityUnavailable: If no speech recognizer can run here
        """
        if self.state.status is not SessionStatus.IDLE:
            raise InvalidSessionOperation(
                f"Cannot start a session while {self.state.status.value}"
            )

        self.last_error = None
        self._set_status(SessionStatus.CONNECTING)

        pair = self.state.language_pair
        source = get_language_by_code(pair.source)
        target = get_language_by_code(pair.target)
        if source is None or target is None:
            error = ConfigurationError(f"Unsupported language pair: {pair.source} -> {pair.target}")
            self._enter_error(error)
            raise error

        try:
            recognizer = self.recognizer_factory(source.speech_code)
        except CapabilityUnavailable as e:
            self._enter_error(e)
            raise

        self._source = source
        self._target = target
        self._attach(recognizer)
        self._wants_capture = True

        try:
            recognizer.start()
        except Exception as e:
            logger.error(f"Failed to start speech recognition: {e}", exc_info=True)
            self._wants_capture = False
            self._release_recognizer()
            self._enter_error(CapabilityUnavailable(f"Failed to start speech recognition: {e}"))
            raise

        logger.info(f"🎤 Session starting ({recognizer.name}, {source.speech_code})")

    def stop(self) -> None:
        """Stop capture and abandon pending work. A no-op when idle."""
        if self.state.status is SessionStatus.IDLE:
            logger.debug("stop() ignored: no active session")
            return

        self._wants_capture = False
        self._release_recognizer()
        self._cancel_debounce()

        for request in list(self._inflight.values()):
            if request.task is not None and not request.task.done():
                request.task.cancel()
        self._latest_token.clear()

        self.state.current_entry_id = None
        self._set_status(SessionStatus.IDLE)
        logger.info("🛑 Session stopped")

    async def drain(self) -> None:
        """Wait until every in-flight translation request has finished."""
        while self._inflight:
            tasks = [request.task for request in self._inflight.values() if request.task is not None]
            if not tasks:
                break
            await asyncio.gather(*tasks, return_exceptions=True)

    def set_language_pair(self, language_pair: LanguagePair) -> None:
        if self.state.is_active:
            raise InvalidSessionOperation("Cannot change languages while a session is active")
        self.state.language_pair = language_pair
        logger.info(f"Language pair set to {language_pair.source} -> {language_pair.target}")

    def reset_log(self) -> int:
        """Clear the transcript log.

        Raises:
            InvalidSessionOperation: If capture is active or the log is empty
        """
        if self.state.is_active:
            raise InvalidSessionOperation("Cannot clear the log while a session is active")
        if len(self.log) == 0:
            raise InvalidSessionOperation("The log is already empty")

        count = self.log.clear()
        self._latest_token.clear()
        self.state.current_entry_id = None
        self.publisher.publish_cleared(count)
        logger.info(f"Cleared {count} log entries")
        return count

    # ------------------------------------------------------------------
    # Recognizer callbacks
    # ------------------------------------------------------------------

    def handle_recognizer_start(self) -> None:
        logger.info("Speech recognition started")
        if self.state.status is SessionStatus.CONNECTING:
            self._set_status(SessionStatus.LISTENING)
            self._refresh_status()

    def handle_recognition_event(self, event: RecognitionEvent) -> None:
        """Update the open entry from interim text and dispatch final text."""
        if not self._wants_capture:
            logger.debug("Ignoring recognition event outside an active session")
            return

        pair = self.state.language_pair
        entries = self.glossary.lookup(pair.source, pair.target)
        interim, final = event.split_transcripts()
        if entries:
            interim = self.glossary.apply(interim, entries)
            final = self.glossary.apply(final, entries)

        if interim.strip():
            self._on_interim(interim, entries)

        final = final.strip()
        if final:
            self._on_final(final, entries)

    def handle_recognizer_error(self, code: str, message: Optional[str] = None) -> None:
        if code in RECOVERABLE_ERRORS:
            logger.debug(f"Ignoring recoverable recognizer error: {code}")
            return

        if code in PERMISSION_ERRORS:
            error: HanasuError = PermissionDenied(PERMISSION_DENIED_MESSAGE)
        else:
            detail = f": {message}" if message else ""
            error = CapabilityUnavailable(f"Speech recognition error ({code}){detail}")

        logger.error(f"Recognizer error {code}: {message or ''}")
        self._halt_capture()
        self._enter_error(error)

    def handle_recognizer_end(self) -> None:
        if not self._wants_capture or self._recognizer is None:
            logger.debug("Speech recognition ended")
            return

        # The recognizer stops on its own after silence or a duration limit
        logger.info("Speech recognition ended while listening; restarting")
        try:
            self._recognizer.start()
        except Exception as e:
            logger.error(f"Failed to restart speech recognition: {e}", exc_info=True)
            self._halt_capture()
            self._enter_error(CapabilityUnavailable(f"Failed to restart speech recognition: {e}"))

    # ------------------------------------------------------------------
    # Transcript and translation dispatch
    # ------------------------------------------------------------------

    def _on_interim(self, text: str, entries: List[GlossaryEntry]) -> None:
        entry_id = self.state.current_entry_id
        if entry_id is None or self.log.get(entry_id) is None:
            entry_id = self._create_entry(text)
        else:
            self._update_entry(entry_id, original=text)
        self._schedule_debounce(entry_id, text, entries)

    def _on_final(self, text: str, entries: List[GlossaryEntry]) -> None:
        self._cancel_debounce()

        entry_id = self.state.current_entry_id
        if entry_id is None or self.log.get(entry_id) is None:
            entry_id = self._create_entry(text)
        else:
            self._update_entry(entry_id, original=text)

        self.state.current_entry_id = None
        self._dispatch(entry_id, text, entries, is_terminal=True)

    def _create_entry(self, text: str) -> str:
        entry = LogEntry(id=self._new_entry_id(), original=text)
        self.log.append(entry)
        self.state.current_entry_id = entry.id
        self.publisher.publish_entry(entry)
        logger.debug(f"Created log entry {entry.id}")
        return entry.id

    def _new_entry_id(self) -> str:
        return f"log-{int(time.time() * 1000)}-{next(self._entry_sequence)}"

    def _update_entry(self, entry_id: str, **fields) -> Optional[LogEntry]:
        def mutate(entry: LogEntry) -> None:
            for name, value in fields.items():
                setattr(entry, name, value)

        entry = self.log.update_by_id(entry_id, mutate)
        if entry is not None:
            self.publisher.publish_entry(entry)
        return entry

    def _schedule_debounce(self, entry_id: str, text: str, entries: List[GlossaryEntry]) -> None:
        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self.state.pending_debounce_handle = loop.call_later(
            self.debounce_seconds,
            self._on_debounce_fired,
            entry_id,
            text,
            entries,
            self._debounce_generation,
        )

    def _cancel_debounce(self) -> None:
        handle = self.state.pending_debounce_handle
        if handle is not None:
            handle.cancel()
            self.state.pending_debounce_handle = None
        # Invalidates a timer that already fired but has not run yet
        self._debounce_generation += 1

    def _on_debounce_fired(self, entry_id: str, text: str, entries: List[GlossaryEntry],
                           generation: int) -> None:
        if (generation != self._debounce_generation
                or entry_id != self.state.current_entry_id
                or not self._wants_capture):
            logger.debug(f"Dropping stale debounce for {entry_id}")
            return
        self.state.pending_debounce_handle = None
        self._dispatch(entry_id, text, entries, is_terminal=False)

    def _dispatch(self, entry_id: str, text: str, entries: List[GlossaryEntry], is_terminal: bool) -> None:
        self._cancel_requests_for(entry_id)

        token = next(self._token_sequence)
        self._latest_token[entry_id] = token
        self.state.active_translation_token = token

        request = TranslationRequest(
            token=token,
            entry_id=entry_id,
            text=text,
            is_terminal=is_terminal,
            glossary_entries=list(entries),
        )
        self._inflight[token] = request
        request.task = asyncio.get_running_loop().create_task(self._run_request(request))
        request.task.add_done_callback(lambda _task: self._on_request_done(token))

        logger.info(f"Translating {entry_id} (#{token}, {'final' if is_terminal else 'interim'}): {text!r}")
        self._refresh_status()

    def _cancel_requests_for(self, entry_id: str) -> None:
        for request in self._inflight.values():
            if request.entry_id == entry_id and request.task is not None and not request.task.done():
                logger.debug(f"Cancelling superseded request #{request.token} for {entry_id}")
                request.task.cancel()

    async def _run_request(self, request: TranslationRequest) -> None:
        stream = None
        try:
            stream = self.translation_client.translate(
                request.text,
                self._source.translation_name,
                self._target.translation_name,
                request.glossary_entries,
            )
            async for event in stream:
                self._merge(request, event)
                if isinstance(event, (Done, Failed)):
                    break
            else:
                # Stream ended without a terminal event
                self._merge(request, Done())
        except asyncio.CancelledError:
            logger.debug(f"Translation request #{request.token} cancelled")
            raise
        except Exception as e:
            logger.error(f"Translation request #{request.token} crashed: {e}", exc_info=True)
            self._merge(request, Failed(str(e)))
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _on_request_done(self, token: int) -> None:
        # A task cancelled before its first step never runs its finally block
        self._inflight.pop(token, None)
        self._refresh_status()

    def _merge(self, request: TranslationRequest, event: TranslationEvent) -> None:
        """Apply a translation event if its request is still the entry's latest."""
        if self._latest_token.get(request.entry_id) != request.token:
            logger.debug(f"Discarding {type(event).__name__} from superseded request #{request.token}")
            return

        if isinstance(event, Delta):
            request.accumulated += event.text
            self._update_entry(request.entry_id, translated=request.accumulated)
        elif isinstance(event, Done):
            if request.is_terminal:
                self._update_entry(request.entry_id, is_final=True)
                logger.info(f"✅ Finalized {request.entry_id}: {request.accumulated!r}")
        elif isinstance(event, Failed):
            logger.warning(f"Translation failed for {request.entry_id}: {event.reason}")
            self._update_entry(request.entry_id, translated=TRANSLATION_ERROR_MARKER, is_final=True)
            # The entry is frozen; further speech opens a new one
            if request.entry_id == self.state.current_entry_id:
                self._cancel_debounce()
                self.state.current_entry_id = None

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def translated_transcript(self) -> str:
        """Join every entry's translation, skipping empty and failed ones."""
        parts = []
        for entry in self.log.list_ordered():
            text = entry.translated.strip()
            if text and text != TRANSLATION_ERROR_MARKER:
                parts.append(text)
        return " ".join(parts)

    def generate_question(self, reference_url: Optional[str] = None) -> AsyncIterator[TranslationEvent]:
        """Return a stream of follow-up questions for the session so far.

        Raises:
            InvalidSessionOperation: While capturing, without a question client,
                or when nothing has been translated yet
        """
        if self.question_client is None:
            raise InvalidSessionOperation("Question generation is not configured")
        if self._wants_capture or self.state.is_active:
            raise InvalidSessionOperation("Question generation is unavailable while listening")

        transcript = self.translated_transcript()
        if not transcript:
            raise InvalidSessionOperation("No translated text available. Record something first.")

        pair = self.state.language_pair
        source = get_language_by_code(pair.source)
        target = get_language_by_code(pair.target)
        return self.question_client.generate_question(
            transcript,
            reference_url,
            source.translation_name if source else pair.source,
            target.translation_name if target else pair.target,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _attach(self, recognizer: AbstractSpeechRecognizer) -> None:
        recognizer.on_start = self.handle_recognizer_start
        recognizer.on_result = self.handle_recognition_event
        recognizer.on_error = self.handle_recognizer_error
        recognizer.on_end = self.handle_recognizer_end
        self._recognizer = recognizer

    def _release_recognizer(self) -> None:
        recognizer = self._recognizer
        if recognizer is None:
            return
        self._recognizer = None
        recognizer.detach()
        try:
            recognizer.stop()
        except Exception as e:
            logger.warning(f"Error stopping recognizer: {e}")

    def _halt_capture(self) -> None:
        """Stop listening after a fatal error; in-flight translations keep running."""
        self._wants_capture = False
        self._release_recognizer()
        self._cancel_debounce()

    def _enter_error(self, error: HanasuError) -> None:
        self.last_error = error
        self._set_status(SessionStatus.ERROR, str(error))

    def _refresh_status(self) -> None:
        if self.state.status not in (SessionStatus.LISTENING, SessionStatus.TRANSLATING):
            return
        desired = SessionStatus.TRANSLATING if self._inflight else SessionStatus.LISTENING
        self._set_status(desired)

    def _set_status(self, status: SessionStatus, reason: Optional[str] = None) -> None:
        if status is self.state.status and reason == self.state.error_reason:
            return
        previous = self.state.status
        self.state.status = status
        self.state.error_reason = reason if status is SessionStatus.ERROR else None
        self.publisher.publish_status(status, reason)
        logger.info(f"Session status: {previous.value} -> {status.value}")
