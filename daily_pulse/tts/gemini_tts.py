# daily_pulse/tts/gemini_tts.py
"""
Gemini text-to-speech narration.

Long scripts are split on paragraph boundaries and synthesized chunk by
chunk; the raw PCM of each chunk is concatenated into one WAV.
"""

import logging
from typing import Optional

from google import genai
from google.genai import errors, types
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from daily_pulse.config import get_settings
from daily_pulse.logging_config import log_llm_call
from daily_pulse.tts.base import (
    NarrationError,
    NarrationGenerator,
    NarrationResult,
    pcm_to_wav,
    wav_duration_seconds,
)

logger = logging.getLogger(__name__)

MAX_CHUNK_CHARS = 4000


def split_script(script: str, max_chars: int = MAX_CHUNK_CHARS) -> list[str]:
    """
    Split a script into chunks of at most max_chars, on paragraph boundaries.

    A single paragraph longer than max_chars becomes its own chunk.
    """
    chunks: list[str] = []
    current = ""
    for paragraph in (p.strip() for p in script.split("\n\n")):
        if not paragraph:
            continue
        candidate = f"{current}\n\n{paragraph}" if current else paragraph
        if len(candidate) <= max_chars or not current:
            current = candidate
        else:
            chunks.append(current)
            current = paragraph
    if current:
        chunks.append(current)
    return chunks


class GeminiNarrationGenerator(NarrationGenerator):
    """Narrates with a prebuilt Gemini voice."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        settings = get_settings()
        self._model = model or settings.GEMINI_TTS_MODEL
        self._voice = voice or settings.GEMINI_TTS_VOICE

        if client is not None:
            self._client = client
            return

        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            raise ValueError("Gemini API key required. Set GEMINI_API_KEY env var or pass api_key.")
        self._client = genai.Client(api_key=api_key)

    @property
    def name(self) -> str:
        return "gemini"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception_type(errors.ServerError),
        reraise=True,
    )
    def _synthesize_chunk(self, text: str) -> bytes:
        """Returns raw PCM audio data (L16, 24kHz, mono)."""
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=self._voice,
                    ),
                ),
            ),
        )

        response = self._client.models.generate_content(
            model=self._model,
            contents=text,
            config=config,
        )

        if response.candidates and response.candidates[0].content:
            for part in response.candidates[0].content.parts or []:
                if part.inline_data and part.inline_data.data:
                    return part.inline_data.data

        raise NarrationError("No audio data in Gemini TTS response")

    def synthesize(self, script: str) -> NarrationResult:
        chunks = split_script(script)
        if not chunks:
            raise NarrationError("Narration script is empty")

        pcm = bytearray()
        with log_llm_call("google", self._model, "narration"):
            for i, chunk in enumerate(chunks):
                try:
                    pcm.extend(self._synthesize_chunk(chunk))
                except errors.APIError as e:
                    raise NarrationError(f"Narration failed on chunk {i + 1}/{len(chunks)}: {e}") from e

        audio = pcm_to_wav(bytes(pcm))
        duration = wav_duration_seconds(audio)
        logger.info(f"Narrated {len(chunks)} chunks, {duration}s of audio")
        return NarrationResult(audio=audio, duration_seconds=duration)
