"""Tests for the ffmpeg encoder sink that do not need an ffmpeg binary."""

import asyncio
from pathlib import Path

import numpy as np
import pytest

from shorts_engine.errors import EncoderError
from shorts_engine.utils.config import EncoderConfig
from shorts_engine.video_assembly.encoder import FfmpegEncoderSink


def _value_after(cmd, flag):
    return cmd[cmd.index(flag) + 1]


def test_video_command_pipes_raw_frames():
    sink = FfmpegEncoderSink(108, 192, 30, 24000)

    cmd = sink.video_command(Path("/tmp/out.mp4"))

    assert cmd[0] == "ffmpeg"
    assert _value_after(cmd, "-f") == "rawvideo"
    assert _value_after(cmd, "-pix_fmt") == "bgr24"
    assert _value_after(cmd, "-s") == "108x192"
    assert "pipe:" in cmd
    assert "libx264" in cmd
    assert _value_after(cmd, "-b:v") == "5M"
    assert "-y" in cmd
    assert "/tmp/out.mp4" in cmd
    assert _value_after(cmd, "-loglevel") == "error"


def test_video_command_uses_configured_binary_and_codec():
    settings = EncoderConfig(ffmpeg_binary="/opt/ffmpeg/bin/ffmpeg", video_codec="libvpx-vp9",
                             video_bitrate="2M", container="webm")
    sink = FfmpegEncoderSink(540, 960, 30, 24000, settings)

    cmd = sink.video_command(Path("/tmp/out.webm"))

    assert cmd[0] == "/opt/ffmpeg/bin/ffmpeg"
    assert "libvpx-vp9" in cmd
    assert _value_after(cmd, "-b:v") == "2M"
    assert sink.container == "webm"


def test_write_before_open_fails():
    sink = FfmpegEncoderSink(108, 192, 30, 24000)

    with pytest.raises(EncoderError):
        asyncio.run(sink.write(np.zeros((192, 108, 3), dtype=np.uint8), np.zeros(800)))


def test_missing_binary_raises_encoder_error(tmp_path):
    settings = EncoderConfig(ffmpeg_binary=str(tmp_path / "no-such-ffmpeg"))
    sink = FfmpegEncoderSink(108, 192, 30, 24000, settings, work_dir=tmp_path)

    with pytest.raises(EncoderError, match="Could not start ffmpeg"):
        asyncio.run(sink.open())
    assert list(tmp_path.iterdir()) == []
