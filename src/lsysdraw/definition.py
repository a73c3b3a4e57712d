from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from .color import HSL
from .lsystem import Grammar, GrammarError
from .turtle import PALETTE_SIZE, TurtleSettings, default_palette

DEFAULT_NAME = "untitled"


class DefinitionError(ValueError):
    pass


@dataclass(frozen=True)
class LSystemDefinition:
    name: str
    axiom: str
    grammar: Grammar
    settings: TurtleSettings


def _number(data: Mapping[str, Any], key: str, default: float | None = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise DefinitionError(f"Definition is missing required field '{key}'.")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DefinitionError(f"Field '{key}' must be a number.")
    number = float(value)
    if not math.isfinite(number):
        raise DefinitionError(f"Field '{key}' must be finite.")
    return number


def _parse_rules(rules_raw: Any) -> Grammar:
    if not isinstance(rules_raw, Mapping):
        raise DefinitionError("Field 'rules' must be an object mapping symbols to rule lists.")
    parsed: Dict[str, List[Tuple[str, float]]] = {}
    for symbol, entries in rules_raw.items():
        if not isinstance(entries, list):
            raise DefinitionError(f"Rules for symbol '{symbol}' must be a list.")
        options: List[Tuple[str, float]] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise DefinitionError(f"Rule {index} for symbol '{symbol}' must be an object.")
            successor = entry.get("succ")
            if not isinstance(successor, str):
                raise DefinitionError(f"Rule {index} for symbol '{symbol}' is missing 'succ'.")
            # A stale 'prob' from older saves is recomputed from the odds.
            odds = _number(entry, "odds", 1.0)
            options.append((successor, odds))
        parsed[str(symbol)] = options
    try:
        return Grammar(parsed)
    except GrammarError as exc:
        raise DefinitionError(str(exc)) from exc


def _parse_colors(colors_raw: Any) -> Tuple[str, ...]:
    if colors_raw is None:
        return default_palette()
    if not isinstance(colors_raw, list) or len(colors_raw) != PALETTE_SIZE:
        raise DefinitionError(f"Field 'colors' must be a list of {PALETTE_SIZE} colors.")
    if not all(isinstance(color, str) for color in colors_raw):
        raise DefinitionError("Field 'colors' must contain '#RRGGBB' strings.")
    return tuple(colors_raw)


def _parse_color_modifier(raw: Any) -> HSL:
    if raw is None:
        return HSL(h=0.0, s=1.0, l=1.0)
    if not isinstance(raw, Mapping):
        raise DefinitionError("Field 'colorMod' must be an object with h, s and l.")
    return HSL(h=_number(raw, "h", 0.0), s=_number(raw, "s", 1.0), l=_number(raw, "l", 1.0))


def parse_definition(data: Any, default_name: str = DEFAULT_NAME) -> LSystemDefinition:
    if not isinstance(data, Mapping):
        raise DefinitionError("Definition must be a JSON object.")
    axiom = data.get("axiom")
    if not isinstance(axiom, str):
        raise DefinitionError("Definition is missing required field 'axiom'.")
    if "rules" not in data:
        raise DefinitionError("Definition is missing required field 'rules'.")
    grammar = _parse_rules(data["rules"])
    name = data.get("name", default_name)
    if not isinstance(name, str):
        raise DefinitionError("Field 'name' must be a string.")

    try:
        settings = TurtleSettings(
            distance=_number(data, "dist"),
            distance_scale=_number(data, "distScale", 1.0),
            turn_angle=math.radians(_number(data, "turnAngle")),
            turn_scale=_number(data, "turnScale", 1.0),
            line_width=_number(data, "lineWidth", 1.0),
            width_scale=_number(data, "widthScale", 1.0),
            colors=_parse_colors(data.get("colors")),
            color_modifier=_parse_color_modifier(data.get("colorMod")),
            start_angle=math.radians(_number(data, "startAngle", 90.0)),
        )
    except DefinitionError:
        raise
    except ValueError as exc:
        raise DefinitionError(str(exc)) from exc

    return LSystemDefinition(name=name or default_name, axiom=axiom, grammar=grammar, settings=settings)


def loads_definition(text: str, default_name: str = DEFAULT_NAME) -> LSystemDefinition:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DefinitionError(f"Definition is not valid JSON: {exc}") from exc
    return parse_definition(data, default_name=default_name)


def load_definition(path: str | Path) -> LSystemDefinition:
    definition_path = Path(path)
    if not definition_path.exists():
        raise FileNotFoundError(f"Definition file not found: {definition_path}")
    text = definition_path.read_text(encoding="utf-8")
    return loads_definition(text, default_name=definition_path.stem)


def dump_definition(definition: LSystemDefinition) -> Dict[str, Any]:
    settings = definition.settings
    rules: Dict[str, List[Dict[str, Any]]] = {}
    for rule in definition.grammar.rules():
        rules.setdefault(rule.predecessor, []).append({"succ": rule.successor, "odds": rule.odds})
    modifier = settings.color_modifier
    return {
        "name": definition.name,
        "axiom": definition.axiom,
        "rules": rules,
        "dist": settings.distance,
        "distScale": settings.distance_scale,
        "turnAngle": math.degrees(settings.turn_angle),
        "turnScale": settings.turn_scale,
        "lineWidth": settings.line_width,
        "widthScale": settings.width_scale,
        "colors": list(settings.colors),
        "colorMod": {"h": modifier.h, "s": modifier.s, "l": modifier.l},
        "startAngle": math.degrees(settings.start_angle),
    }


def save_definition(definition: LSystemDefinition, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(dump_definition(definition), indent=2) + "\n", encoding="utf-8")
    return target
