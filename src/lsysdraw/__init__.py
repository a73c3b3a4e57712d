"""Stochastic L-system rewriting and turtle rendering."""

from .config import load_config
from .definition import DefinitionError, LSystemDefinition, load_definition, save_definition
from .lsystem import Grammar, GrammarError, LSystem, Rule, rewrite
from .main import render_definition
from .surface import DrawingSurface, SvgSurface
from .turtle import Calibration, TurtleSettings, TurtleStackError, calibrate, draw, render

__all__ = [
    "Calibration",
    "DefinitionError",
    "DrawingSurface",
    "Grammar",
    "GrammarError",
    "LSystem",
    "LSystemDefinition",
    "Rule",
    "SvgSurface",
    "TurtleSettings",
    "TurtleStackError",
    "calibrate",
    "draw",
    "load_config",
    "load_definition",
    "render",
    "render_definition",
    "rewrite",
    "save_definition",
]
