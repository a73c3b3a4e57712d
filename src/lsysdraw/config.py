from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.10
    import tomli as tomllib  # type: ignore[no-redef]

DEFAULT_MAX_SYMBOLS = 2_000_000
DEFAULT_MAX_ITERATIONS = 64


@dataclass(frozen=True)
class RenderConfig:
    width: float = 800.0
    height: float = 800.0
    iterations: int = 4
    margin: float = 0.0
    seed: Optional[int] = None
    background: Optional[str] = "#ffffff"
    precision: int = 2
    calibrate: bool = True
    scale: float = 1.0
    start_x: Optional[float] = None
    start_y: Optional[float] = None
    max_symbols: int = DEFAULT_MAX_SYMBOLS
    max_iterations: int = DEFAULT_MAX_ITERATIONS


@dataclass(frozen=True)
class LibraryConfig:
    directory: Optional[Path] = None


@dataclass(frozen=True)
class Config:
    render: RenderConfig = field(default_factory=RenderConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)


def default_config() -> Config:
    return Config()


def _optional_float(section: Mapping[str, Any], key: str) -> Optional[float]:
    value = section.get(key)
    if value is None:
        return None
    return float(value)


def _parse_render(render_raw: Any) -> RenderConfig:
    if render_raw is None:
        return RenderConfig()
    if not isinstance(render_raw, Mapping):
        raise ValueError("[render] must be a table if provided.")
    defaults = RenderConfig()
    width = float(render_raw.get("width", defaults.width))
    height = float(render_raw.get("height", defaults.height))
    if width <= 0 or height <= 0:
        raise ValueError("render.width and render.height must be positive.")
    margin = float(render_raw.get("margin", defaults.margin))
    if margin < 0:
        raise ValueError("render.margin must not be negative.")
    seed_raw = render_raw.get("seed")
    background = render_raw.get("background", defaults.background)
    if background is not None:
        background = str(background).strip() or None
    max_symbols = int(render_raw.get("max_symbols", defaults.max_symbols))
    if max_symbols <= 0:
        raise ValueError("render.max_symbols must be positive.")
    max_iterations = int(render_raw.get("max_iterations", defaults.max_iterations))
    if max_iterations < 0:
        raise ValueError("render.max_iterations must not be negative.")
    calibrate = render_raw.get("calibrate", defaults.calibrate)
    if not isinstance(calibrate, bool):
        raise ValueError("render.calibrate must be true or false.")
    return RenderConfig(
        width=width,
        height=height,
        iterations=max(0, int(render_raw.get("iterations", defaults.iterations))),
        margin=margin,
        seed=int(seed_raw) if seed_raw is not None else None,
        background=background,
        precision=max(0, int(render_raw.get("precision", defaults.precision))),
        calibrate=calibrate,
        scale=float(render_raw.get("scale", defaults.scale)),
        start_x=_optional_float(render_raw, "start_x"),
        start_y=_optional_float(render_raw, "start_y"),
        max_symbols=max_symbols,
        max_iterations=max_iterations,
    )


def _parse_library(library_raw: Any, base_dir: Path) -> LibraryConfig:
    if library_raw is None:
        return LibraryConfig()
    if not isinstance(library_raw, Mapping):
        raise ValueError("[library] must be a table if provided.")
    directory = library_raw.get("directory")
    if directory is None:
        return LibraryConfig()
    if not isinstance(directory, str) or not directory.strip():
        raise ValueError("library.directory must be a non-empty string.")
    path = Path(directory)
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    if not path.is_dir():
        raise FileNotFoundError(f"Definition library not found: {path}")
    return LibraryConfig(directory=path)


def load_config(path: str | Path) -> Config:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("rb") as handle:
        raw = tomllib.load(handle)

    return Config(
        render=_parse_render(raw.get("render")),
        library=_parse_library(raw.get("library"), config_path.parent),
    )
