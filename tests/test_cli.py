"""Tests for command line parsing."""

import pytest

from shorts_engine.cli import _slugify, build_parser


def test_render_arguments():
    args = build_parser().parse_args([
        "render", "--script", "script.json", "--narration", "voice.pcm",
        "--clip", "a.mp4", "--clip", "b.mp4", "--upload",
    ])

    assert args.command == "render"
    assert args.clips == ["a.mp4", "b.mp4"]
    assert args.upload
    assert not args.realtime
    assert args.config == "configs/config.yaml"


def test_render_requires_script_and_narration():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["render", "--script", "script.json"])


def test_slugify():
    assert _slugify("The Silent Planet!") == "the_silent_planet"
    assert _slugify("???") == "short"
