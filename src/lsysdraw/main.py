from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .config import Config, RenderConfig, default_config, load_config
from .definition import LSystemDefinition, dump_definition, load_definition
from .log import configure_logging
from .lsystem import LSystem, RandomSource, SequenceTooLongError
from .surface import SvgSurface
from .turtle import Calibration, TurtleStackError, calibrate, draw

logger = logging.getLogger(__name__)


@dataclass
class Rendering:
    sequence: str
    calibration: Calibration
    surface: SvgSurface

    def to_svg(self) -> str:
        return self.surface.to_svg()


def generate_sequence(
    definition: LSystemDefinition,
    iterations: int,
    seed: int | None = None,
    rng: Optional[RandomSource] = None,
    max_symbols: int | None = None,
) -> str:
    lsystem = LSystem(definition.axiom, definition.grammar, seed=seed, rng=rng)
    sequence = lsystem.expand(iterations, max_symbols=max_symbols)
    logger.info("Expanded '%s' to %d symbols over %d generation(s)", definition.name, len(sequence), iterations)
    return sequence


def _placement(sequence: str, definition: LSystemDefinition, render: RenderConfig) -> Calibration:
    if render.calibrate:
        return calibrate(sequence, render.width, render.height, definition.settings, margin=render.margin)
    return Calibration(
        scale=render.scale,
        origin_x=render.start_x if render.start_x is not None else render.width / 2,
        origin_y=render.start_y if render.start_y is not None else render.height / 2,
    )


def render_definition(
    definition: LSystemDefinition,
    render: RenderConfig,
    iterations: int | None = None,
    seed: int | None = None,
    rng: Optional[RandomSource] = None,
) -> Rendering:
    generations = render.iterations if iterations is None else iterations
    if generations > render.max_iterations:
        raise ValueError(
            f"Requested {generations} generation(s); the limit is {render.max_iterations}."
        )
    effective_seed = render.seed if seed is None else seed
    sequence = generate_sequence(
        definition, generations, seed=effective_seed, rng=rng, max_symbols=render.max_symbols
    )
    calibration = _placement(sequence, definition, render)
    surface = SvgSurface(
        render.width,
        render.height,
        background=render.background,
        precision=render.precision,
        title=definition.name,
    )
    draw(sequence, definition.settings, calibration, surface)
    return Rendering(sequence=sequence, calibration=calibration, surface=surface)


def _render_config(config: Config, args: argparse.Namespace) -> RenderConfig:
    render = config.render
    overrides = {}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    if args.margin is not None:
        if args.margin < 0:
            raise ValueError("--margin must not be negative.")
        overrides["margin"] = args.margin
    return replace(render, **overrides) if overrides else render


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Expand a stochastic L-system and render it with a turtle.")
    parser.add_argument("definition", type=Path, help="Path to the L-system definition (JSON).")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to a TOML config file with render defaults.")
    parser.add_argument("--iterations", type=int, default=None,
                        help="Override the number of rewrite generations from the config.")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for rule selection, for reproducible output.")
    parser.add_argument("--width", type=float, default=None, help="Canvas width.")
    parser.add_argument("--height", type=float, default=None, help="Canvas height.")
    parser.add_argument("--margin", type=float, default=None, help="Blank border kept around the drawing.")
    parser.add_argument("--format", choices=("svg", "sequence", "json"), default="svg",
                        help="Choose the output format.")
    parser.add_argument("--output", type=Path, default=None,
                        help="Write the output to this file instead of stdout.")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to $LOG_LEVEL).")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        config = load_config(args.config) if args.config is not None else default_config()
        render = _render_config(config, args)
        definition = load_definition(args.definition)
        rendering = render_definition(definition, render, iterations=args.iterations, seed=args.seed)
    except (ValueError, FileNotFoundError, TurtleStackError, SequenceTooLongError) as exc:
        # DefinitionError and GrammarError are ValueErrors.
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.format == "svg":
        output = rendering.to_svg()
    elif args.format == "sequence":
        output = rendering.sequence + "\n"
    else:
        calibration = rendering.calibration
        payload = {
            "definition": dump_definition(definition),
            "symbols": len(rendering.sequence),
            "calibration": {
                "scale": calibration.scale,
                "origin_x": calibration.origin_x,
                "origin_y": calibration.origin_y,
            },
        }
        output = json.dumps(payload, indent=2) + "\n"

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
