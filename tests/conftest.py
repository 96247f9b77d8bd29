import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from sena_music.application.interfaces.audio_resolver import AudioResolver
from sena_music.application.interfaces.stream_strategy import AudioStreamHandle, StreamStrategy
from sena_music.application.interfaces.voice_transport import VoiceTransport
from sena_music.application.services.guild_queue import GuildQueue
from sena_music.application.services.playback_pipeline import FallbackPlaybackPipeline
from sena_music.domain.music.entities import PlaylistResult, SingleResult, Track
from sena_music.domain.music.events import PlaybackFailed, TrackEnded
from sena_music.domain.shared.exceptions import ResolutionError, StrategyError, VoiceConnectionError

GUILD_ID = 111111111111111111
VOICE_CHANNEL_ID = 222222222222222222


def make_track(
    n: int | str = 1,
    *,
    title: str | None = None,
    duration: int | None = 180,
    requested_by: str = "alice",
    locator: str | None = None,
    artist: str | None = "Test Artist",
) -> Track:
    return Track(
        title=title or f"Song {n}",
        locator=locator or f"https://www.youtube.com/watch?v=vid{n}",
        requested_by=requested_by,
        duration=duration,
        artist=artist,
    )


# ============================================================================
# Fakes
# ============================================================================


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeChannel:
    """Records everything the queue and announcer send."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.embeds: list[object] = []
        self.messages: list[MagicMock] = []
        self.fail = False

    async def send(self, content=None, **kwargs):
        if self.fail:
            raise RuntimeError("channel gone")
        if content is not None:
            self.sent.append(content)
        if "embed" in kwargs:
            self.embeds.append(kwargs["embed"])
        message = MagicMock()
        message.edit = AsyncMock()
        self.messages.append(message)
        return message


class FakeSource:
    def __init__(self, locator: str) -> None:
        self.locator = locator
        self.cleaned_up = False

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakeStrategy(StreamStrategy):
    """Succeeds unless the locator is listed in ``failing``."""

    def __init__(self, name: str = "fake", failing: set[str] | None = None) -> None:
        self.name = name
        self.failing = failing if failing is not None else set()
        self.attempts: list[str] = []

    async def attempt(self, locator: str) -> AudioStreamHandle:
        self.attempts.append(locator)
        if locator in self.failing:
            raise StrategyError(self.name, f"cannot stream {locator}")
        return AudioStreamHandle(source=FakeSource(locator), strategy=self.name, stream_url=locator)


class FakeResolver(AudioResolver):
    """Maps queries to canned results; unknown queries resolve to a single track."""

    def __init__(self) -> None:
        self.results: dict[str, SingleResult | PlaylistResult | Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.gates: dict[str, object] = {}

    async def resolve(self, query: str, requester: str) -> SingleResult | PlaylistResult:
        self.calls.append((query, requester))
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()  # type: ignore[attr-defined]
        result = self.results.get(query)
        if isinstance(result, Exception):
            raise result
        if result is not None:
            return result
        return SingleResult(track=make_track(query, requested_by=requester))

    async def search(self, query: str, limit: int = 3) -> list[Track]:
        return [make_track(f"{query}-{i}") for i in range(limit)]


class FakeTransport(VoiceTransport):
    """In-memory transport; tests finish tracks by delivering events to the sink."""

    def __init__(self, *, connected: bool = False) -> None:
        self.connected: set[int] = {GUILD_ID} if connected else set()
        self.sinks: dict[int, object] = {}
        self.played: list[tuple[int, AudioStreamHandle, int]] = []
        self.stopped = 0
        self.paused = False
        self.connect_error: Exception | None = None
        self.play_error: Exception | None = None

    async def connect(self, guild_id: int, channel_id: int) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected.add(guild_id)

    async def disconnect(self, guild_id: int) -> bool:
        self.connected.discard(guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.connected

    async def play(self, guild_id: int, handle: AudioStreamHandle, session_id: int) -> None:
        if guild_id not in self.connected:
            raise VoiceConnectionError(None)
        if self.play_error is not None:
            raise self.play_error
        self.played.append((guild_id, handle, session_id))
        self.paused = False

    async def stop(self, guild_id: int) -> bool:
        self.stopped += 1
        return bool(self.played)

    async def pause(self, guild_id: int) -> bool:
        if not self.played or self.paused:
            return False
        self.paused = True
        return True

    async def resume(self, guild_id: int) -> bool:
        if not self.paused:
            return False
        self.paused = False
        return True

    def set_event_sink(self, guild_id: int, sink) -> None:
        self.sinks[guild_id] = sink

    @property
    def last_session_id(self) -> int:
        return self.played[-1][2]

    async def finish(self, *, interrupted: bool = False, session_id: int | None = None) -> None:
        sid = self.last_session_id if session_id is None else session_id
        await self.sinks[GUILD_ID](TrackEnded(session_id=sid, interrupted=interrupted))

    async def fail(self, error: str, *, session_id: int | None = None) -> None:
        sid = self.last_session_id if session_id is None else session_id
        await self.sinks[GUILD_ID](PlaybackFailed(session_id=sid, error=error))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def strategy():
    return FakeStrategy()


@pytest.fixture
def pipeline(strategy):
    return FallbackPlaybackPipeline([strategy])


@pytest.fixture
def transport():
    return FakeTransport(connected=True)


@pytest.fixture
def announcer():
    mock = MagicMock()
    mock.track_started = AsyncMock()
    mock.refresh = AsyncMock()
    mock.stop = MagicMock()
    return mock


@pytest.fixture
def make_queue(channel, resolver, pipeline, transport, announcer, clock):
    def _make(**overrides) -> GuildQueue:
        kwargs = dict(
            resolver=resolver,
            pipeline=pipeline,
            transport=transport,
            announcer=announcer,
            clock=clock,
            rng=random.Random(42),
        )
        kwargs.update(overrides)
        return GuildQueue(GUILD_ID, channel, **kwargs)

    return _make


@pytest.fixture
def queue(make_queue):
    return make_queue()


@pytest.fixture
def sample_track():
    return make_track(1)


@pytest.fixture
def resolution_error():
    return ResolutionError("Search failed: No search results")
