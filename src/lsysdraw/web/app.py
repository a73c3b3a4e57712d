from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
import uvicorn

from ..config import Config, default_config, load_config
from ..definition import DefinitionError, LSystemDefinition, dump_definition, load_definition, parse_definition
from ..log import configure_logging
from ..lsystem import SequenceTooLongError
from ..main import render_definition
from ..turtle import TurtleStackError

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
SVG_MEDIA_TYPE = "image/svg+xml"


class DefinitionLibrary:
    def __init__(self, directory: Optional[Path]) -> None:
        self._directory = directory
        self._cache: Dict[str, LSystemDefinition] = {}

    def names(self) -> List[str]:
        if self._directory is None:
            return []
        return sorted(path.stem for path in self._directory.glob("*.json"))

    def get(self, name: str, reload: bool = False) -> LSystemDefinition:
        if reload or name not in self._cache:
            if self._directory is None or name not in self.names():
                raise KeyError(name)
            self._cache[name] = load_definition(self._directory / f"{name}.json")
        return self._cache[name]


def _svg_response(
    config: Config,
    definition: LSystemDefinition,
    iterations: Optional[int],
    seed: Optional[int],
) -> Response:
    if iterations is not None and iterations < 0:
        raise HTTPException(status_code=400, detail="iterations must not be negative.")
    if iterations is not None and iterations > config.render.max_iterations:
        raise HTTPException(
            status_code=400,
            detail=f"iterations must not exceed {config.render.max_iterations}.",
        )
    try:
        rendering = render_definition(definition, config.render, iterations=iterations, seed=seed)
    except (TurtleStackError, SequenceTooLongError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(content=rendering.to_svg(), media_type=SVG_MEDIA_TYPE)


def create_app(config_path: Optional[Path] = None, config: Optional[Config] = None) -> FastAPI:
    if config is None:
        config = load_config(config_path) if config_path is not None else default_config()
    library = DefinitionLibrary(config.library.directory)

    app = FastAPI(title="L-System Studio", version="0.1.0")

    if ASSETS_DIR.is_dir():
        app.mount("/assets", StaticFiles(directory=ASSETS_DIR), name="assets")

    def lookup(name: str, reload: bool = False) -> LSystemDefinition:
        try:
            return library.get(name, reload=reload)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Unknown definition '{name}'.") from exc
        except DefinitionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/", response_class=HTMLResponse)
    async def serve_index() -> HTMLResponse:
        index_path = ASSETS_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=500, detail="Index file missing.")
        return HTMLResponse(index_path.read_text(encoding="utf-8"))

    @app.get("/api/definitions")
    async def list_definitions() -> JSONResponse:
        return JSONResponse({"definitions": library.names()})

    @app.get("/api/definitions/{name}")
    async def get_definition(name: str, reload: Optional[int] = None) -> JSONResponse:
        return JSONResponse(dump_definition(lookup(name, reload=bool(reload))))

    @app.get("/api/render/{name}")
    async def render_named(name: str, iterations: Optional[int] = None, seed: Optional[int] = None) -> Response:
        return _svg_response(config, lookup(name), iterations, seed)

    @app.post("/api/render")
    async def render_posted(payload: Dict[str, Any] = Body(...)) -> Response:
        raw_definition = payload.get("definition")
        try:
            definition = parse_definition(raw_definition)
        except DefinitionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        iterations = payload.get("iterations")
        seed = payload.get("seed")
        if iterations is not None and (isinstance(iterations, bool) or not isinstance(iterations, int)):
            raise HTTPException(status_code=400, detail="iterations must be an integer.")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise HTTPException(status_code=400, detail="seed must be an integer.")
        return _svg_response(config, definition, iterations, seed)

    return app


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Serve rendered L-systems over HTTP.")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/default_config.toml"),
        help="Path to the configuration file.",
    )
    parser.add_argument("--library", type=Path, default=None,
                        help="Directory of JSON definitions (overrides the config).")
    parser.add_argument("--host", default="127.0.0.1", help="Host interface to bind.")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to $LOG_LEVEL).")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    config_path = args.config.resolve()
    config = load_config(config_path) if config_path.exists() else default_config()
    if args.library is not None:
        config = replace(config, library=replace(config.library, directory=args.library.resolve()))
    app = create_app(config=config)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
