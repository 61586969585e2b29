"""
Test configuration and fixtures for the timeline encoder.

This module provides pytest fixtures so that:
- tests never pick up ANIMEXPORT_* variables from the developer shell
- filter and sound handles are built the same way in every test
"""

import os
import sys

import pytest

# Ensure repo root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from animexport.config.schemas import EncoderConfig
from animexport.timeline.capabilities import make_handle, make_linear_gradient
from animexport.timeline.writer import TimelineWriter


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip ANIMEXPORT_* overrides so config precedence tests are repeatable"""
    for key in list(os.environ):
        if key.startswith("ANIMEXPORT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config():
    return EncoderConfig()


@pytest.fixture
def writer(config):
    return TimelineWriter(config)


@pytest.fixture
def drop_shadow_props():
    return {
        "enabled": True,
        "angle": 45.0,
        "blur_x": 4.0,
        "blur_y": 6.0,
        "distance": 5.0,
        "hide_object": False,
        "inner_shadow": True,
        "knockout": False,
        "quality": 2,
        "strength": 1,
        "shadow_color": (0, 0, 0, 255),
    }


@pytest.fixture
def blur_props():
    return {"enabled": True, "blur_x": 8, "blur_y": 2, "quality": 0}


@pytest.fixture
def glow_props():
    return {
        "enabled": False,
        "blur_x": 3.5,
        "blur_y": 3.5,
        "inner_shadow": False,
        "knockout": True,
        "quality": 1,
        "strength": 2,
        "shadow_color": 0xFF8800,
    }


@pytest.fixture
def gradient_glow_props():
    return {
        "enabled": True,
        "angle": 90.0,
        "blur_x": 10.0,
        "blur_y": 10.0,
        "distance": 0.0,
        "knockout": False,
        "quality": 2,
        "strength": 3,
        "placement": 1,
        "gradient": make_linear_gradient([(0, (255, 0, 0, 255)), (255, (0, 0, 255, 0))]),
    }


@pytest.fixture
def sound_handle():
    return make_handle(
        sound={
            "loop_mode": {"mode": 1, "repeat_count": 3},
            "sync_mode": 0,
            "sound_limit": {"in_pos44": 100, "out_pos44": 44100},
        }
    )
