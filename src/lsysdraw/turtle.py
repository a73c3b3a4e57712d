"""Turtle interpretation of L-system symbol strings.

Both passes share one transition table (:meth:`Turtle.apply`):

    F  move forward and draw          f  move forward without drawing
    C  fill a circle (drawing only)   [  push state    ]  pop state
    +  heading -= turn angle          -  heading += turn angle
    *  turn angle *= turn scale       /  turn angle /= turn scale
    |  mirror the turn angle
    >  distance *= distance scale     <  distance /= distance scale
    #  line width *= width scale      !  line width /= width scale
    0-9  select a palette color
    H  shift the color by the modifier   h  undo that shift

Any other symbol is ignored. Headings follow the canvas convention where y
grows downwards, so ``-`` turns clockwise on screen.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .color import HSL, normalize_hex, shift_color
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

PALETTE_SIZE = 10
DEFAULT_COLOR = "#000000"


class TurtleStackError(RuntimeError):
    pass


class Command(Enum):
    FORWARD = "F"
    MOVE = "f"
    CIRCLE = "C"
    PUSH = "["
    POP = "]"
    TURN_LEFT = "+"
    TURN_RIGHT = "-"
    TURN_SCALE_UP = "*"
    TURN_SCALE_DOWN = "/"
    TURN_FLIP = "|"
    DISTANCE_UP = ">"
    DISTANCE_DOWN = "<"
    WIDTH_UP = "#"
    WIDTH_DOWN = "!"
    COLOR = "0"
    HUE_FORWARD = "H"
    HUE_BACK = "h"
    NOOP = ""


_COMMANDS: Dict[str, Command] = {
    command.value: command
    for command in Command
    if command not in (Command.COLOR, Command.NOOP)
}
_COMMANDS.update({str(digit): Command.COLOR for digit in range(PALETTE_SIZE)})

STYLE_COMMANDS = frozenset(
    {Command.WIDTH_UP, Command.WIDTH_DOWN, Command.COLOR, Command.HUE_FORWARD, Command.HUE_BACK}
)


def classify(symbol: str) -> Command:
    return _COMMANDS.get(symbol, Command.NOOP)


def default_palette() -> Tuple[str, ...]:
    return (DEFAULT_COLOR,) * PALETTE_SIZE


@dataclass(frozen=True)
class TurtleSettings:
    distance: float
    turn_angle: float
    distance_scale: float = 1.0
    turn_scale: float = 1.0
    line_width: float = 1.0
    width_scale: float = 1.0
    colors: Tuple[str, ...] = field(default_factory=default_palette)
    color_modifier: HSL = HSL(h=0.0, s=1.0, l=1.0)
    start_angle: float = math.pi / 2

    def __post_init__(self) -> None:
        for name in ("distance", "turn_angle", "start_angle"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"Turtle setting '{name}' must be a finite number.")
        for name in ("line_width", "width_scale"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Turtle setting '{name}' must be a positive number.")
        for name in ("distance_scale", "turn_scale"):
            value = getattr(self, name)
            if not math.isfinite(value) or value == 0:
                raise ValueError(f"Turtle setting '{name}' must be a non-zero number.")
        if len(self.colors) != PALETTE_SIZE:
            raise ValueError(f"Turtle palette must hold exactly {PALETTE_SIZE} colors.")
        object.__setattr__(self, "colors", tuple(normalize_hex(color) for color in self.colors))


@dataclass
class TurtleState:
    x: float
    y: float
    heading: float
    distance: float
    turn_angle: float
    line_width: float
    color: str

    def copy(self) -> "TurtleState":
        return replace(self)


@dataclass(frozen=True)
class Bounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    max_line_width: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class Calibration:
    scale: float
    origin_x: float
    origin_y: float
    bounds: Optional[Bounds] = None


class Turtle:
    """Run state plus the transition table shared by calibration and drawing."""

    def __init__(self, settings: TurtleSettings, x: float, y: float, scale: float = 1.0) -> None:
        self.settings = settings
        self.scale = scale
        self.state = TurtleState(
            x=x,
            y=y,
            heading=-settings.start_angle,
            distance=settings.distance,
            turn_angle=settings.turn_angle,
            line_width=settings.line_width,
            color=settings.colors[0],
        )
        self.stack: List[TurtleState] = []

    @property
    def step(self) -> float:
        return self.state.distance * self.scale

    def _advance(self) -> None:
        state = self.state
        state.x += math.cos(state.heading) * self.step
        state.y += math.sin(state.heading) * self.step

    def apply(self, command: Command, symbol: str) -> None:
        state = self.state
        settings = self.settings
        if command is Command.FORWARD or command is Command.MOVE:
            self._advance()
        elif command is Command.PUSH:
            self.stack.append(state.copy())
        elif command is Command.POP:
            if not self.stack:
                raise TurtleStackError("Unbalanced ']' with an empty turtle stack.")
            self.state = self.stack.pop()
        elif command is Command.TURN_LEFT:
            state.heading -= state.turn_angle
        elif command is Command.TURN_RIGHT:
            state.heading += state.turn_angle
        elif command is Command.TURN_SCALE_UP:
            state.turn_angle *= settings.turn_scale
        elif command is Command.TURN_SCALE_DOWN:
            state.turn_angle /= settings.turn_scale
        elif command is Command.TURN_FLIP:
            state.turn_angle = -state.turn_angle
        elif command is Command.DISTANCE_UP:
            state.distance *= settings.distance_scale
        elif command is Command.DISTANCE_DOWN:
            state.distance /= settings.distance_scale
        elif command is Command.WIDTH_UP:
            state.line_width *= settings.width_scale
        elif command is Command.WIDTH_DOWN:
            state.line_width /= settings.width_scale
        elif command is Command.COLOR:
            state.color = settings.colors[int(symbol)]
        elif command is Command.HUE_FORWARD:
            state.color = shift_color(state.color, settings.color_modifier)
        elif command is Command.HUE_BACK:
            state.color = shift_color(state.color, settings.color_modifier, inverse=True)
        # CIRCLE has no effect on the run state and NOOP does nothing.

    def finish(self) -> None:
        if self.stack:
            logger.warning("Symbol stream ended with %d unclosed branch(es).", len(self.stack))


class _BoundsTracker:
    def __init__(self, x: float, y: float, line_width: float) -> None:
        self.min_x = self.max_x = x
        self.min_y = self.max_y = y
        self.max_line_width = line_width

    def include(self, x: float, y: float, radius: float = 0.0) -> None:
        self.min_x = min(self.min_x, x - radius)
        self.max_x = max(self.max_x, x + radius)
        self.min_y = min(self.min_y, y - radius)
        self.max_y = max(self.max_y, y + radius)

    def bounds(self) -> Bounds:
        return Bounds(
            min_x=self.min_x,
            max_x=self.max_x,
            min_y=self.min_y,
            max_y=self.max_y,
            max_line_width=self.max_line_width,
        )


def measure(symbols: Iterable[str], width: float, height: float, settings: TurtleSettings) -> Bounds:
    """Dry-run the transition table from the canvas center and return the visited extent."""
    turtle = Turtle(settings, x=width / 2, y=height / 2)
    tracker = _BoundsTracker(turtle.state.x, turtle.state.y, turtle.state.line_width)
    for symbol in symbols:
        command = classify(symbol)
        if command is Command.NOOP:
            continue
        turtle.apply(command, symbol)
        state = turtle.state
        if command is Command.CIRCLE:
            tracker.include(state.x, state.y, abs(turtle.step))
        else:
            tracker.include(state.x, state.y)
        tracker.max_line_width = max(tracker.max_line_width, state.line_width)
    turtle.finish()
    return tracker.bounds()


def calibrate(
    symbols: Iterable[str],
    width: float,
    height: float,
    settings: TurtleSettings,
    margin: float = 0.0,
) -> Calibration:
    """Compute the uniform scale and start point that fit the drawing into the canvas."""
    if width <= 0 or height <= 0:
        raise ValueError("Canvas width and height must be positive.")
    if margin < 0:
        raise ValueError("Margin must not be negative.")
    bounds = measure(symbols, width, height, settings)
    center_x, center_y = width / 2, height / 2

    if bounds.width <= 0 and bounds.height <= 0:
        logger.debug("Degenerate drawing extent; using unit scale at the canvas center.")
        return Calibration(scale=1.0, origin_x=center_x, origin_y=center_y, bounds=bounds)

    inset = margin + bounds.max_line_width / 2
    usable_width = width - 2 * inset
    usable_height = height - 2 * inset
    if usable_width <= 0 or usable_height <= 0:
        raise ValueError("Canvas is too small for the requested margin and line width.")

    scale = 1.0 / max(bounds.width / usable_width, bounds.height / usable_height)
    offset_x = (width - bounds.width * scale) / 2
    offset_y = (height - bounds.height * scale) / 2
    calibration = Calibration(
        scale=scale,
        origin_x=(center_x - bounds.min_x) * scale + offset_x,
        origin_y=(center_y - bounds.min_y) * scale + offset_y,
        bounds=bounds,
    )
    logger.debug(
        "Calibrated %.1fx%.1f drawing to scale %.4f at (%.2f, %.2f)",
        bounds.width,
        bounds.height,
        calibration.scale,
        calibration.origin_x,
        calibration.origin_y,
    )
    return calibration


def _apply_style(surface: DrawingSurface, state: TurtleState) -> None:
    surface.line_width = state.line_width
    surface.stroke_style = state.color
    surface.fill_style = state.color


def draw(
    symbols: Iterable[str],
    settings: TurtleSettings,
    calibration: Calibration,
    surface: DrawingSurface,
) -> None:
    """Replay the transition table from the calibrated origin, emitting paths on ``surface``."""
    turtle = Turtle(settings, x=calibration.origin_x, y=calibration.origin_y, scale=calibration.scale)
    _apply_style(surface, turtle.state)
    surface.begin_path()
    surface.move_to(turtle.state.x, turtle.state.y)

    for symbol in symbols:
        command = classify(symbol)
        if command is Command.NOOP:
            continue
        if command in STYLE_COMMANDS:
            surface.stroke()
            turtle.apply(command, symbol)
            _apply_style(surface, turtle.state)
            surface.begin_path()
            surface.move_to(turtle.state.x, turtle.state.y)
            continue

        style = (turtle.state.color, turtle.state.line_width)
        turtle.apply(command, symbol)
        state = turtle.state
        if command is Command.FORWARD:
            surface.line_to(state.x, state.y)
        elif command is Command.MOVE:
            surface.move_to(state.x, state.y)
        elif command is Command.POP:
            # The restored branch may carry a different pen.
            if (state.color, state.line_width) != style:
                surface.stroke()
                _apply_style(surface, state)
                surface.begin_path()
            surface.move_to(state.x, state.y)
        elif command is Command.CIRCLE:
            surface.stroke()
            surface.begin_path()
            surface.arc(state.x, state.y, abs(turtle.step))
            surface.fill()
            surface.begin_path()
            surface.move_to(state.x, state.y)

    surface.stroke()
    turtle.finish()


def render(
    symbols: Sequence[str] | str,
    settings: TurtleSettings,
    surface: DrawingSurface,
    width: float,
    height: float,
    margin: float = 0.0,
) -> Calibration:
    calibration = calibrate(symbols, width, height, settings, margin=margin)
    draw(symbols, settings, calibration, surface)
    return calibration
