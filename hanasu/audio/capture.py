"""Microphone capture feeding raw PCM chunks to a streaming recognizer."""

import pyaudio
import time
import logging
from threading import Thread, Event
from typing import Optional, Callable

from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous microphone capture on a background thread."""

    def __init__(
        self,
        callback: Callable[[AudioEvent], None],
        error_callback: Optional[Callable[[Exception], None]] = None,
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives every captured AudioEvent (called on the capture thread)
            error_callback: Receives the error if the device cannot be opened or read
            sample_rate: Audio sample rate (16kHz for speech recognition)
            chunk_size: Size of each audio chunk in samples (100ms at 16kHz)
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.audio_event_callback = callback
        self.error_callback = error_callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and release the device."""
        if not self.is_recording:
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self) -> pyaudio.Stream:
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __publish_audio_event(self, audio_chunk: bytes) -> None:
        self.total_chunks += 1
        self.audio_event_callback(AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            final=self.stop_event.is_set()
        ))

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = None
        try:
            stream = self.__open_audio_stream()
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self.__publish_audio_event(audio_chunk)
        except OSError as e:
            logger.error(f"Audio capture failed: {e}")
            if self.error_callback:
                self.error_callback(e)
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
