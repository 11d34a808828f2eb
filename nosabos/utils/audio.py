# nosabos/utils/audio.py - PCM helpers for synthesized speech playback

import base64
import binascii
import logging
import struct
import numpy as np

logger = logging.getLogger(__name__)

SPEECH_SAMPLE_RATE = 24000


class AudioProcessor:
    """Wraps raw 16-bit PCM speech (as returned by Gemini TTS) for browser playback"""

    def __init__(self):
        self.sample_width = 2  # 16-bit audio
        self.channels = 1      # Mono audio

    def create_wav_header(self, sample_rate: int, data_size: int, num_channels: int = 1) -> bytes:
        """Create a 44 byte RIFF/WAVE header for PCM16 data"""
        byte_rate = sample_rate * num_channels * self.sample_width
        block_align = num_channels * self.sample_width

        return struct.pack(
            '<4sI4s4sIHHIIHH4sI',
            b'RIFF',
            data_size + 36,
            b'WAVE',
            b'fmt ',
            16,                     # fmt chunk size
            1,                      # PCM
            num_channels,
            sample_rate,
            byte_rate,
            block_align,
            self.sample_width * 8,
            b'data',
            data_size
        )

    def pcm16_to_wav(self, pcm_data: bytes, sample_rate: int = SPEECH_SAMPLE_RATE, channels: int = 1) -> bytes:
        """Prefix raw PCM16 with a WAV header"""
        if len(pcm_data) % 2:
            logger.warning("PCM16 data has an odd length; dropping the trailing byte")
            pcm_data = pcm_data[:-1]
        return self.create_wav_header(sample_rate, len(pcm_data), channels) + pcm_data

    def decode_base64_pcm(self, payload: str) -> bytes:
        """Decode inline base64 audio; raises ValueError on malformed input"""
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, TypeError) as e:
            raise ValueError(f"Invalid base64 audio payload: {e}")

    def convert_sample_rate(self, audio_data: bytes, from_rate: int, to_rate: int) -> bytes:
        """Resample PCM16 using linear interpolation"""
        if from_rate == to_rate or not audio_data:
            return audio_data

        audio_array = np.frombuffer(audio_data, dtype=np.int16)
        new_length = int(len(audio_array) * to_rate / from_rate)
        old_indices = np.arange(len(audio_array))
        new_indices = np.linspace(0, len(audio_array) - 1, new_length)
        resampled = np.interp(new_indices, old_indices, audio_array.astype(np.float32))
        return resampled.astype(np.int16).tobytes()

    def normalize_audio(self, audio_data: bytes) -> bytes:
        """Scale to 90% of full range"""
        audio_array = np.frombuffer(audio_data, dtype=np.int16)
        if len(audio_array) == 0:
            return audio_data
        peak = np.max(np.abs(audio_array.astype(np.int32)))
        if peak == 0:
            return audio_data
        return (audio_array * 0.9 * 32767 / peak).astype(np.int16).tobytes()

    def get_audio_duration(self, pcm_data: bytes, sample_rate: int = SPEECH_SAMPLE_RATE, channels: int = 1) -> float:
        return len(pcm_data) / (sample_rate * channels * self.sample_width)
