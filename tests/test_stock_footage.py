"""Tests for stock footage lookup and its fallback list."""

import asyncio

import aiohttp
import pytest

from shorts_engine.media_generation import stock_footage
from shorts_engine.media_generation.stock_footage import (
    FALLBACK_VIDEOS, PexelsFootageProvider, StaticFootageProvider, extract_links, pick_video_file
)
from shorts_engine.utils.config import FootageConfig


def test_missing_api_key_uses_fallback():
    clips = asyncio.run(PexelsFootageProvider(FootageConfig()).find_clips(["space"]))

    assert clips == FALLBACK_VIDEOS
    assert clips is not FALLBACK_VIDEOS


def test_network_error_uses_fallback(monkeypatch):
    def broken_session(*args, **kwargs):
        raise aiohttp.ClientError("connection refused")

    monkeypatch.setattr(stock_footage.aiohttp, "ClientSession", broken_session)
    provider = PexelsFootageProvider(FootageConfig(pexels_api_key="key"))

    assert asyncio.run(provider.find_clips(["ocean"])) == FALLBACK_VIDEOS


def test_hd_file_is_preferred():
    video = {"video_files": [
        {"height": 360, "link": "sd.mp4"},
        {"height": 1280, "link": "hd.mp4"},
        {"height": 2160, "link": "uhd.mp4"},
    ]}

    assert pick_video_file(video) == "hd.mp4"


def test_first_file_when_no_hd():
    video = {"video_files": [{"height": 2160, "link": "uhd.mp4"}, {"height": 240, "link": "tiny.mp4"}]}

    assert pick_video_file(video) == "uhd.mp4"
    assert pick_video_file({"video_files": []}) is None


def test_extract_links_skips_videos_without_files():
    payload = {"videos": [
        {"video_files": [{"height": 720, "link": "one.mp4"}]},
        {"video_files": []},
        {"video_files": [{"height": 1080, "link": "two.mp4"}]},
    ]}

    assert extract_links(payload) == ["one.mp4", "two.mp4"]
    assert extract_links({}) == []


def test_static_provider():
    provider = StaticFootageProvider(["a.mp4"])

    assert asyncio.run(provider.find_clips(["ignored"])) == ["a.mp4"]
    with pytest.raises(ValueError):
        StaticFootageProvider([])


class FakeResponse:
    def __init__(self, status, payload):
        self.status, self.payload = status, payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def get(self, url, params=None, headers=None):
        return self.response


def _provider_with_payload(monkeypatch, payload, status=200):
    monkeypatch.setattr(stock_footage.aiohttp, "ClientSession",
                        lambda *args, **kwargs: FakeSession(FakeResponse(status, payload)))
    return PexelsFootageProvider(FootageConfig(pexels_api_key="key"))


def test_search_results_are_returned(monkeypatch):
    payload = {"videos": [{"video_files": [{"height": 720, "link": "one.mp4"}]}]}
    provider = _provider_with_payload(monkeypatch, payload)

    assert asyncio.run(provider.find_clips(["ocean"])) == ["one.mp4"]


@pytest.mark.parametrize("payload", [
    [],
    "not an object",
    {"videos": "nope"},
    {"videos": [["not", "a", "video"]]},
    {"videos": [{"video_files": [["bad"]]}]},
])
def test_malformed_payload_uses_fallback(monkeypatch, payload):
    provider = _provider_with_payload(monkeypatch, payload)

    assert asyncio.run(provider.find_clips(["ocean"])) == FALLBACK_VIDEOS


def test_http_error_uses_fallback(monkeypatch):
    provider = _provider_with_payload(monkeypatch, {"error": "rate limited"}, status=429)

    assert asyncio.run(provider.find_clips(["ocean"])) == FALLBACK_VIDEOS


def test_string_heights_are_coerced():
    video = {"video_files": [
        {"height": "360", "link": "sd.mp4"},
        {"height": "720", "link": "hd.mp4"},
    ]}

    assert pick_video_file(video) == "hd.mp4"
    assert pick_video_file({"video_files": [{"height": "tall", "link": "odd.mp4"}]}) == "odd.mp4"
