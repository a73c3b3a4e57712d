from __future__ import annotations

from pathlib import Path
from typing import List, Protocol


class DrawingSurface(Protocol):
    """Minimal vector-path capability the turtle draws against."""

    line_width: float
    stroke_style: str
    fill_style: str

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def arc(self, cx: float, cy: float, radius: float) -> None: ...

    def stroke(self) -> None: ...

    def fill(self) -> None: ...


def _fmt(value: float, precision: int) -> str:
    if not value:
        value = 0.0
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text or "0"


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


class SvgSurface:
    """Collects stroked and filled paths and serializes them as an SVG document.

    Follows canvas semantics: ``stroke``/``fill`` paint the current path
    without clearing it, ``begin_path`` starts an empty one.
    """

    def __init__(
        self,
        width: float,
        height: float,
        background: str | None = "#ffffff",
        precision: int = 2,
        title: str | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.background = background
        self.precision = precision
        self.title = title
        self.line_width = 1.0
        self.stroke_style = "#000000"
        self.fill_style = "#000000"
        self._commands: List[str] = []
        self._has_segments = False
        self._elements: List[str] = []

    @property
    def elements(self) -> List[str]:
        return list(self._elements)

    def _point(self, x: float, y: float) -> str:
        return f"{_fmt(x, self.precision)} {_fmt(y, self.precision)}"

    def begin_path(self) -> None:
        self._commands = []
        self._has_segments = False

    def move_to(self, x: float, y: float) -> None:
        if self._commands and self._commands[-1].startswith("M"):
            # Consecutive moves collapse into the last one.
            self._commands[-1] = f"M{self._point(x, y)}"
            return
        self._commands.append(f"M{self._point(x, y)}")

    def line_to(self, x: float, y: float) -> None:
        if not self._commands:
            self._commands.append(f"M{self._point(x, y)}")
            return
        self._commands.append(f"L{self._point(x, y)}")
        self._has_segments = True

    def arc(self, cx: float, cy: float, radius: float) -> None:
        r = _fmt(abs(radius), self.precision)
        self._commands.append(f"M{self._point(cx + radius, cy)}")
        self._commands.append(f"A{r} {r} 0 1 0 {self._point(cx - radius, cy)}")
        self._commands.append(f"A{r} {r} 0 1 0 {self._point(cx + radius, cy)}")
        self._commands.append("Z")
        self._has_segments = True

    def _path_data(self) -> str | None:
        if not self._has_segments:
            return None
        return " ".join(self._commands)

    def stroke(self) -> None:
        data = self._path_data()
        if data is None:
            return
        self._elements.append(
            f'<path d="{data}" fill="none" stroke="{_escape(self.stroke_style)}" '
            f'stroke-width="{_fmt(self.line_width, self.precision)}" '
            'stroke-linecap="round" stroke-linejoin="round" />'
        )

    def fill(self) -> None:
        data = self._path_data()
        if data is None:
            return
        self._elements.append(f'<path d="{data}" fill="{_escape(self.fill_style)}" stroke="none" />')

    def to_svg(self) -> str:
        width = _fmt(self.width, self.precision)
        height = _fmt(self.height, self.precision)
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
            f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">',
        ]
        if self.title:
            lines.append(f"  <title>{_escape(self.title)}</title>")
        if self.background and self.background.lower() != "none":
            lines.append(f'  <rect x="0" y="0" width="{width}" height="{height}" fill="{_escape(self.background)}" />')
        lines.extend(f"  {element}" for element in self._elements)
        lines.append("</svg>")
        return "\n".join(lines) + "\n"

    def save(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_svg(), encoding="utf-8")
        return target
