"""
Voice keyword commands.

Speech recognition itself is external. Finished transcripts are turned
into engine requests here:
    "auto rotate" / "auto rotation" / "autorotation" -> ToggleAutoRotate
    any of "drag", "rotate", "zoom"                  -> SetMode(...)
"""

import logging
import threading

from core.types import InteractionMode, SetMode, ToggleAutoRotate

logger = logging.getLogger(__name__)

AUTO_ROTATE_PHRASES = ("auto rotation", "autorotation", "auto rotate")


def parse_voice_command(transcript: str) -> list:
    """Translate a final transcript into a list of requests.

    An auto-rotate phrase wins over mode keywords ("auto rotate" also
    contains "rotate"). Several mode keywords produce several requests,
    in drag, rotate, zoom order.
    """
    command = (transcript or "").lower().strip()
    if not command:
        return []
    if any(phrase in command for phrase in AUTO_ROTATE_PHRASES):
        return [ToggleAutoRotate()]
    return [SetMode(mode) for mode in InteractionMode if mode.value in command]


class VoiceCommandRouter:
    """Feeds parsed voice requests into the engine's request queue."""

    def __init__(self, engine):
        self._engine = engine
        self._last_transcript = ""

    def handle_transcript(self, final_transcript: str, interim_transcript: str = "") -> list:
        """Route a recognizer callback. Interim text is never acted on."""
        if not final_transcript:
            return []
        self._last_transcript = final_transcript
        requests = parse_voice_command(final_transcript)
        if not requests:
            logger.debug("No command in transcript: %r", final_transcript)
        for request in requests:
            self._engine.submit(request)
        return requests

    @property
    def last_transcript(self) -> str:
        return self._last_transcript


class StreamTranscriptSource:
    """Reads one transcript per line from a text stream on a daemon thread.

    Lets an external recognizer (or a person at the terminal) pipe
    final transcripts into the app.
    """

    def __init__(self, stream, router: VoiceCommandRouter):
        self._stream = stream
        self._router = router
        self._running = False
        self._thread = None

    def start(self):
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._read_loop, daemon=True)
        self._thread.start()
        logger.info("Voice transcript source started")

    def _read_loop(self):
        for line in self._stream:
            if not self._running:
                break
            line = line.strip()
            if line:
                self._router.handle_transcript(line)
        self._running = False

    def stop(self):
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running
