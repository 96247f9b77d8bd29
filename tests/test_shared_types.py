"""Unit tests for domain/shared/types.py: Pydantic Annotated type constraints."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from sena_music.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    PositiveInt,
    SessionId,
    TrackTitleStr,
)


def _model_for(annotation, field_name: str = "v"):
    """Dynamically create a Pydantic model with a single field of the given type."""
    return type("M", (BaseModel,), {"__annotations__": {field_name: annotation}})


class TestDiscordSnowflake:
    M = _model_for(DiscordSnowflake)

    def test_bounds(self):
        assert self.M(v=1).v == 1
        assert self.M(v=2**64 - 1).v == 2**64 - 1

    @pytest.mark.parametrize("value", [0, -1, 2**64])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            self.M(v=value)


class TestNumericTypes:
    def test_positive_int(self):
        M = _model_for(PositiveInt)
        assert M(v=3).v == 3
        with pytest.raises(ValidationError):
            M(v=0)

    @pytest.mark.parametrize("annotation", [DurationSeconds, SessionId])
    def test_zero_allowed_negative_rejected(self, annotation):
        M = _model_for(annotation)
        assert M(v=0).v == 0
        with pytest.raises(ValidationError):
            M(v=-1)


class TestStringTypes:
    def test_non_empty(self):
        M = _model_for(NonEmptyStr)
        assert M(v="x").v == "x"
        with pytest.raises(ValidationError):
            M(v="")

    def test_track_title_length(self):
        M = _model_for(TrackTitleStr)
        assert M(v="a" * 500).v == "a" * 500
        with pytest.raises(ValidationError):
            M(v="a" * 501)

    @pytest.mark.parametrize("url", ["http://example.com", "https://youtu.be/abc"])
    def test_http_url_accepted(self, url):
        assert _model_for(HttpUrlStr)(v=url).v == url

    @pytest.mark.parametrize("url", ["ftp://example.com", "youtube.com/watch?v=x", ""])
    def test_non_http_rejected(self, url):
        with pytest.raises(ValidationError):
            _model_for(HttpUrlStr)(v=url)
