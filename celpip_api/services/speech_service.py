"""
Speech synthesis for listening content through the Gemini TTS model.
"""
from typing import Any, Dict, List
import base64
import binascii
import io
import logging
import re
import wave

from celpip_api.core.config import settings
from celpip_api.core.exceptions import CollaboratorError, ValidationError
from celpip_api.services import gemini_client

logger = logging.getLogger(__name__)

# Prebuilt voices handed out to speakers in order of first appearance
SPEAKER_VOICES = ['Fenrir', 'Kore', 'Puck', 'Charon']
DEFAULT_VOICE = 'Fenrir'
MAX_SPEAKERS = 4

# Gemini TTS returns raw 16-bit mono PCM at 24 kHz
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2

_SPEAKER_PATTERN = re.compile(r'^([A-Za-z0-9 ]+):', re.MULTILINE)


def detect_speakers(text: str) -> List[str]:
    """
    Find speaker labels ("Man: ...", "Woman 2: ...") at line starts.

    Returns:
        Unique labels in order of first appearance
    """
    speakers: List[str] = []
    for match in _SPEAKER_PATTERN.finditer(text):
        name = match.group(1).strip()
        if name and name not in speakers:
            speakers.append(name)
    return speakers


def assign_voices(speakers: List[str]) -> Dict[str, str]:
    """Map the first MAX_SPEAKERS speakers to voices, deterministically by order."""
    return {
        speaker: SPEAKER_VOICES[index % len(SPEAKER_VOICES)]
        for index, speaker in enumerate(speakers[:MAX_SPEAKERS])
    }


def build_speech_config(text: str) -> Dict[str, Any]:
    """Multi-speaker config for dialogues with two or more speakers, else a single voice."""
    speakers = detect_speakers(text)
    if len(speakers) >= 2:
        return {
            "multiSpeakerVoiceConfig": {
                "speakerVoiceConfigs": [
                    {
                        "speaker": speaker,
                        "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                    }
                    for speaker, voice in assign_voices(speakers).items()
                ]
            }
        }
    return {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": DEFAULT_VOICE}}}


def pcm_to_wav(pcm_data: bytes, sample_rate: int = PCM_SAMPLE_RATE, channels: int = PCM_CHANNELS) -> bytes:
    """Wrap raw 16-bit PCM in a WAV container so browsers can play it."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(PCM_SAMPLE_WIDTH)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm_data)
    return buffer.getvalue()


def to_data_url(wav_bytes: bytes) -> str:
    return f"data:audio/wav;base64,{base64.b64encode(wav_bytes).decode('ascii')}"


def generate_speech(text: str) -> bytes:
    """
    Synthesize text to WAV audio.

    Args:
        text: Transcript; "Name:" line prefixes select multi-speaker mode

    Returns:
        WAV bytes

    Raises:
        ValidationError: If text is empty
        CollaboratorError: If the key is missing or Gemini returns no audio
    """
    if not text or not text.strip():
        raise ValidationError("Text is required")

    payload = {
        "contents": [{"parts": [{"text": text}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": build_speech_config(text),
        },
    }

    logger.info(f"Generating speech for text: '{text[:50]}...'")
    data = gemini_client.generate_content(settings.gemini_tts_model, payload)
    audio_b64 = gemini_client.extract_inline_data(data)
    if not audio_b64:
        raise CollaboratorError("No audio generated.")

    try:
        pcm_data = base64.b64decode(audio_b64)
    except (binascii.Error, ValueError) as e:
        raise CollaboratorError("Speech service returned undecodable audio") from e

    return pcm_to_wav(pcm_data)
