"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from sena_music.application.interfaces.audio_resolver import AudioResolver
from sena_music.application.interfaces.notifications import (
    MessageChannel,
    NowPlayingSnapshot,
    PlaybackAnnouncer,
)
from sena_music.application.interfaces.stream_strategy import AudioStreamHandle, StreamStrategy
from sena_music.application.interfaces.voice_transport import VoiceTransport

__all__ = [
    "AudioResolver",
    "AudioStreamHandle",
    "StreamStrategy",
    "VoiceTransport",
    "MessageChannel",
    "NowPlayingSnapshot",
    "PlaybackAnnouncer",
]
