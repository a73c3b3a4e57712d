from __future__ import annotations

from pathlib import Path

import pytest

from lsysdraw.config import DEFAULT_MAX_ITERATIONS, DEFAULT_MAX_SYMBOLS, RenderConfig, default_config, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file() -> None:
    config = default_config()
    assert config.render == RenderConfig()
    assert config.render.max_symbols == DEFAULT_MAX_SYMBOLS
    assert config.render.max_iterations == DEFAULT_MAX_ITERATIONS
    assert config.library.directory is None


def test_render_section_is_parsed(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[render]
width = 640
height = 480
iterations = 6
margin = 2.5
seed = 7
background = "none"
calibrate = false
scale = 3
start_x = 10
start_y = 20
max_iterations = 12
""",
    )
    render = load_config(path).render
    assert (render.width, render.height) == (640.0, 480.0)
    assert render.iterations == 6
    assert render.margin == 2.5
    assert render.seed == 7
    assert render.background == "none"
    assert render.calibrate is False
    assert (render.scale, render.start_x, render.start_y) == (3.0, 10.0, 20.0)
    assert render.max_iterations == 12


def test_library_directory_resolves_relative_to_config(tmp_path: Path) -> None:
    (tmp_path / "defs").mkdir()
    path = _write(tmp_path, '[library]\ndirectory = "defs"\n')
    assert load_config(path).library.directory == (tmp_path / "defs").resolve()


def test_missing_library_directory_fails(tmp_path: Path) -> None:
    path = _write(tmp_path, '[library]\ndirectory = "nowhere"\n')
    with pytest.raises(FileNotFoundError):
        load_config(path)


@pytest.mark.parametrize(
    "text",
    [
        "render = 3\n",
        "[render]\nwidth = 0\n",
        "[render]\nmargin = -1\n",
        "[render]\nmax_symbols = 0\n",
        "[render]\nmax_iterations = -1\n",
        "[render]\ncalibrate = \"false\"\n",
        "[render]\ncalibrate = 0\n",
        "library = []\n",
    ],
)
def test_invalid_sections_fail(tmp_path: Path, text: str) -> None:
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, text))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml")
