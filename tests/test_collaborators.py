import base64
import io
import json
import wave

import pytest
import requests

from celpip_api.core.config import settings
from celpip_api.core.exceptions import CollaboratorError, ValidationError
from celpip_api.services import gemini_client, speech_service


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code
        self.text = json.dumps(body)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._body


def text_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def audio_reply(pcm):
    return {"candidates": [{"content": {"parts": [
        {"inlineData": {"mimeType": "audio/L16;rate=24000", "data": base64.b64encode(pcm).decode()}}
    ]}}]}


@pytest.fixture
def gemini(monkeypatch, client):
    """Configure a key and capture outgoing Gemini requests."""
    monkeypatch.setattr(settings, "google_gemini_api_key", "test-key")
    calls = []
    replies = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(gemini_client.requests, "post", fake_post)
    return calls, replies


# ---------- Writing evaluation ----------

def test_evaluate_writing_without_key_returns_placeholder(client, api_prefix):
    response = client.post(f"{api_prefix}/evaluate-writing", json={
        "questionText": "Write an email.", "userResponse": "Dear manager, ...",
    })
    assert response.status_code == 200

    body = response.json()
    assert body["bandScore"] == 0
    assert body["error"] == "Evaluation service not configured"


def test_evaluate_writing_parses_structured_reply(client, api_prefix, gemini):
    calls, replies = gemini
    evaluation = {
        "bandScore": 9,
        "feedback": "### Content / Coherence\nClear purpose.",
        "corrections": "* **Error:** I has -> **Fix:** I have (agreement)",
    }
    replies.append(FakeResponse(text_reply("```json\n" + json.dumps(evaluation) + "\n```")))

    response = client.post(f"{api_prefix}/evaluate-writing", json={
        "questionText": "Write an email.", "userResponse": "Dear manager, I has a problem.",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["bandScore"] == 9
    assert body["feedback"].startswith("### Content / Coherence")
    assert body["error"] is None

    request = calls[0]
    assert request["url"].endswith(f"{settings.gemini_text_model}:generateContent?key=test-key")
    assert request["json"]["generationConfig"]["responseMimeType"] == "application/json"
    assert "I has a problem" in request["json"]["contents"][0]["parts"][0]["text"]
    assert request["timeout"] == settings.gemini_timeout_seconds


@pytest.mark.parametrize("reply", [
    requests.exceptions.ConnectionError("down"),
    FakeResponse({"error": {"message": "quota"}}, status_code=429),
    FakeResponse(text_reply("not json at all")),
    FakeResponse(text_reply(json.dumps({"feedback": "missing band score"}))),
    FakeResponse({"candidates": []}),
])
def test_evaluate_writing_failures_return_502(client, api_prefix, gemini, reply):
    _, replies = gemini
    replies.append(reply)

    response = client.post(f"{api_prefix}/evaluate-writing", json={
        "questionText": "Write an email.", "userResponse": "Hi",
    })
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to evaluate writing."


# ---------- Speech synthesis ----------

def test_detect_speakers_in_order_of_first_appearance():
    text = "Woman: Hi there.\nMan: Hello.\nWoman: How are you?\nNarrator 2: Later that day."
    assert speech_service.detect_speakers(text) == ["Woman", "Man", "Narrator 2"]


def test_voices_are_assigned_deterministically():
    speakers = ["A", "B", "C", "D", "E"]
    assert speech_service.assign_voices(speakers) == {
        "A": "Fenrir", "B": "Kore", "C": "Puck", "D": "Charon",
    }
    assert speech_service.assign_voices(speakers) == speech_service.assign_voices(list(speakers))


def test_single_speaker_uses_default_voice():
    config = speech_service.build_speech_config("Narrator: Welcome to the test.")
    assert config == {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": "Fenrir"}}}


def test_dialogue_uses_multi_speaker_config():
    config = speech_service.build_speech_config("Man: Hi.\nWoman: Hello.")
    voices = config["multiSpeakerVoiceConfig"]["speakerVoiceConfigs"]
    assert [(v["speaker"], v["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"]) for v in voices] == [
        ("Man", "Fenrir"), ("Woman", "Kore"),
    ]


def test_pcm_to_wav_writes_playable_header():
    pcm = b"\x00\x01" * 2400
    wav_bytes = speech_service.pcm_to_wav(pcm)

    assert wav_bytes[:4] == b"RIFF"
    with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.getframerate() == 24000
        assert wav_file.readframes(wav_file.getnframes()) == pcm


def test_generate_speech_returns_wav_data_url(client, api_prefix, gemini):
    calls, replies = gemini
    pcm = b"\x10\x00" * 100
    replies.append(FakeResponse(audio_reply(pcm)))

    response = client.post(f"{api_prefix}/generate-speech", json={"text": "Man: Hi.\nWoman: Hello."})
    assert response.status_code == 200

    audio_data = response.json()["audioData"]
    assert audio_data.startswith("data:audio/wav;base64,")
    assert base64.b64decode(audio_data.split(",", 1)[1]) == speech_service.pcm_to_wav(pcm)

    request = calls[0]
    assert settings.gemini_tts_model in request["url"]
    assert request["json"]["generationConfig"]["responseModalities"] == ["AUDIO"]


def test_generate_speech_without_audio_returns_502(client, api_prefix, gemini):
    _, replies = gemini
    replies.append(FakeResponse(text_reply("I cannot read that aloud.")))

    response = client.post(f"{api_prefix}/generate-speech", json={"text": "Hello"})
    assert response.status_code == 502


def test_generate_speech_without_key_returns_502(client, api_prefix):
    response = client.post(f"{api_prefix}/generate-speech", json={"text": "Hello"})
    assert response.status_code == 502
    assert response.json()["type"] == "CollaboratorError"


def test_generate_speech_requires_text(client, api_prefix):
    response = client.post(f"{api_prefix}/generate-speech", json={"text": "   "})
    assert response.status_code == 400


def test_generate_speech_rejects_empty_text_before_calling_out():
    with pytest.raises(ValidationError):
        speech_service.generate_speech("")


def test_generate_content_requires_key(monkeypatch):
    monkeypatch.setattr(settings, "google_gemini_api_key", "")
    with pytest.raises(CollaboratorError):
        gemini_client.generate_content("gemini-2.5-flash", {"contents": []})


def test_parse_json_text_rejects_non_objects():
    assert gemini_client.parse_json_text('{"a": 1}') == {"a": 1}
    with pytest.raises(CollaboratorError):
        gemini_client.parse_json_text("[1, 2]")
