"""
Unit tests for the transcription route helpers: audio payload decoding and
language tag normalization.
"""

import base64

import pytest

from chatclone.api.chat import is_empty_transcription_error, normalize_speech_language
from chatclone.services.file_service import decode_data_url

VOICE = base64.b64encode(b"voice").decode("ascii")


@pytest.mark.parametrize(
    ("payload", "hint", "expected"),
    [
        (f"data:audio/webm;codecs=opus;base64,{VOICE}", "audio/ogg", (b"voice", "audio/webm")),
        (f"data:audio/mp4;base64,{VOICE}", "audio/webm", (b"voice", "audio/mp4")),
        (VOICE, "audio/ogg", (b"voice", "audio/ogg")),
        ("data:audio/webm,not-base64", "audio/webm", (None, "audio/webm")),
        ("", "audio/webm", (None, "audio/webm")),
    ],
)
def test_decode_audio_payload(payload, hint, expected):
    assert decode_data_url(payload, hint) == expected


@pytest.mark.parametrize(
    ("hint", "expected"),
    [
        (None, "en-US"),
        ("", "en-US"),
        ("en", "en-US"),
        ("EN", "en-US"),
        ("en_gb", "en-GB"),
        ("pt", "pt-BR"),
        ("pt_PT", "pt-PT"),
        ("ja", "ja-JP"),
        ("nl", "nl"),
        ("zh-Hant", "zh-Hant"),
    ],
)
def test_normalize_speech_language(hint, expected):
    assert normalize_speech_language(hint, "en-US") == expected


def test_configured_default_is_used_without_a_hint():
    assert normalize_speech_language("   ", "en-GB") == "en-GB"


@pytest.mark.parametrize(
    ("message", "empty"),
    [
        ("Transcription returned empty text", True),
        ("upstream: empty transcript", True),
        ("Permission denied", False),
    ],
)
def test_is_empty_transcription_error(message, empty):
    assert is_empty_transcription_error(RuntimeError(message)) is empty
