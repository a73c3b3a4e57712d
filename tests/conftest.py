from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Iterable, List, Tuple

import pytest

from lsysdraw.turtle import TurtleSettings


class RecordingSurface:
    """Drawing surface that records every call for later inspection."""

    def __init__(self) -> None:
        self.line_width = 1.0
        self.stroke_style = "#000000"
        self.fill_style = "#000000"
        self.calls: List[Tuple[Any, ...]] = []

    def begin_path(self) -> None:
        self.calls.append(("begin_path",))

    def move_to(self, x: float, y: float) -> None:
        self.calls.append(("move_to", x, y))

    def line_to(self, x: float, y: float) -> None:
        self.calls.append(("line_to", x, y))

    def arc(self, cx: float, cy: float, radius: float) -> None:
        self.calls.append(("arc", cx, cy, radius))

    def stroke(self) -> None:
        self.calls.append(("stroke", self.stroke_style, self.line_width))

    def fill(self) -> None:
        self.calls.append(("fill", self.fill_style))

    def named(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def points(self) -> List[Tuple[float, float]]:
        return [(call[1], call[2]) for call in self.calls if call[0] in ("move_to", "line_to")]


class ScriptedRandom:
    """Random source that replays a fixed sequence of draws."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def settings() -> TurtleSettings:
    return TurtleSettings(distance=10.0, turn_angle=math.radians(90))


@pytest.fixture
def koch_data() -> dict:
    return {
        "name": "koch",
        "axiom": "F--F--F",
        "rules": {"F": [{"succ": "F+F--F+F", "odds": 1}]},
        "dist": 10,
        "turnAngle": 60,
    }


@pytest.fixture
def koch_file(tmp_path: Path, koch_data: dict) -> Path:
    path = tmp_path / "koch.json"
    path.write_text(json.dumps(koch_data), encoding="utf-8")
    return path
