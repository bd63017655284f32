import os

# widgets need a platform plugin even on headless ci
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from trashtalk.config import Settings
from trashtalk.game_logic import Mark

_CHARS = {"X": Mark.X, "O": Mark.O, "_": Mark.EMPTY, ".": Mark.EMPTY}


@pytest.fixture
def make_board():
    """Build a board from a 9-char string such as "OO_XX____"."""

    def _make(layout: str):
        assert len(layout) == 9
        return [_CHARS[ch] for ch in layout]

    return _make


@pytest.fixture
def fast_settings():
    # no thinking delay, no api key: commentary fails fast and offline
    return Settings(api_key=None, think_delay_min_ms=0, think_delay_spread_ms=0)
