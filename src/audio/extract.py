"""Decode the audio track of a video file via ffmpeg."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile

import soundfile

from src.audio.models import AudioBuffer
from src.config import settings
from src.errors import AudioExtractionError

logger = logging.getLogger(__name__)


def _ffmpeg_to_wav(input_path: str, output_path: str) -> None:
    """Write channel 0 of *input_path* as float WAV at the source sample rate."""
    cmd = [
        settings.ffmpeg_binary, "-y",
        "-i", input_path,
        "-vn",
        "-af", "pan=mono|c0=c0",
        "-c:a", "pcm_f32le",
        output_path,
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise AudioExtractionError(f"ffmpeg not found: {settings.ffmpeg_binary}") from exc
    if result.returncode != 0:
        logger.error("Error extracting audio: %s", result.stderr)
        raise AudioExtractionError(f"Failed to extract audio: {result.stderr.strip()}")


def extract_audio(video_path: str) -> AudioBuffer:
    """Decode the first audio channel of *video_path* into an AudioBuffer.

    The track keeps its native sample rate; conversion to 16 kHz is left to
    :func:`src.audio.resample.resample`.

    Raises:
        AudioExtractionError: If ffmpeg fails or the file has no audio.
    """
    if not os.path.exists(video_path):
        raise AudioExtractionError(f"File not found: {video_path}")

    temp_file = tempfile.NamedTemporaryFile(suffix=".wav", delete=False)
    temp_file.close()
    wav_path = temp_file.name

    try:
        logger.info("Starting audio extraction: %s", video_path)
        _ffmpeg_to_wav(video_path, wav_path)
        try:
            samples, sample_rate = soundfile.read(wav_path, dtype="float32")
        except RuntimeError as exc:
            raise AudioExtractionError(f"Failed to decode audio: {exc}") from exc

        if samples.ndim > 1:
            samples = samples[:, 0]
        if len(samples) == 0:
            raise AudioExtractionError(f"No audio samples in {video_path}")

        logger.info("Audio decoded: %.2fs @ %dHz", len(samples) / sample_rate, sample_rate)
        return AudioBuffer(samples=samples, sample_rate=int(sample_rate))
    finally:
        if os.path.exists(wav_path):
            os.unlink(wav_path)
