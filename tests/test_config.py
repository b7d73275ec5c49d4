"""Tests for command-line configuration."""

import logging

import pytest

from pymole.config import DEFAULT_PRIMARY_INTERFACE, MIN_POLL_RATE, ViewConfig


def test_defaults():
    config = ViewConfig.from_args([])

    assert config == ViewConfig()
    assert config.primary_interface == DEFAULT_PRIMARY_INTERFACE
    assert config.frame_interval == pytest.approx(0.2)
    assert config.log_file is None
    assert config.log_level == logging.WARNING


def test_overrides():
    config = ViewConfig.from_args(
        ["--interface", "eth0", "--interval", "2.5", "--fps", "10", "--top", "8", "--log-level", "DEBUG"]
    )

    assert config.primary_interface == "eth0"
    assert config.refresh_interval == 2.5
    assert config.frame_interval == pytest.approx(0.1)
    assert config.top_processes == 8
    assert config.log_level == logging.DEBUG


def test_interval_is_clamped():
    assert ViewConfig.from_args(["--interval", "0"]).refresh_interval == MIN_POLL_RATE


def test_invalid_fps_exits():
    with pytest.raises(SystemExit):
        ViewConfig.from_args(["--fps", "0"])


def test_invalid_log_level_exits():
    with pytest.raises(SystemExit):
        ViewConfig.from_args(["--log-level", "LOUD"])
