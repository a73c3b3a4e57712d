from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)


class GrammarError(ValueError):
    pass


class SequenceTooLongError(RuntimeError):
    pass


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class Rule:
    predecessor: str
    successor: str
    odds: float = 1.0


@dataclass(frozen=True)
class WeightedRule:
    successor: str
    odds: float
    probability: float


class Grammar:
    """Production rules grouped by predecessor, with normalized probabilities."""

    def __init__(self, rules: Mapping[str, Sequence[Tuple[str, float]]]) -> None:
        self._groups: Dict[str, Tuple[WeightedRule, ...]] = {
            str(symbol): self._prepare_options(str(symbol), options)
            for symbol, options in rules.items()
        }

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> "Grammar":
        grouped: Dict[str, List[Tuple[str, float]]] = {}
        for rule in rules:
            grouped.setdefault(rule.predecessor, []).append((rule.successor, rule.odds))
        return cls(grouped)

    @staticmethod
    def _prepare_options(
        symbol: str, options: Sequence[Tuple[str, float]]
    ) -> Tuple[WeightedRule, ...]:
        if len(symbol) != 1:
            raise GrammarError(f"Predecessor must be a single symbol, got '{symbol}'.")
        if not options:
            raise GrammarError(f"No productions provided for symbol '{symbol}'.")
        weights: List[Tuple[str, float]] = []
        total = 0.0
        for successor, odds in options:
            weight = float(odds)
            if not math.isfinite(weight) or weight < 0:
                raise GrammarError(f"Odds must be a non-negative number for symbol '{symbol}'.")
            total += weight
            weights.append((str(successor), weight))
        if total <= 0:
            raise GrammarError(f"Total odds for symbol '{symbol}' must be greater than zero.")
        return tuple(
            WeightedRule(successor=successor, odds=weight, probability=weight / total)
            for successor, weight in weights
        )

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def options(self, symbol: str) -> Optional[Tuple[WeightedRule, ...]]:
        return self._groups.get(symbol)

    def predecessors(self) -> Tuple[str, ...]:
        return tuple(self._groups)

    def probabilities(self, symbol: str) -> Tuple[float, ...]:
        return tuple(option.probability for option in self._groups.get(symbol, ()))

    def rules(self) -> List[Rule]:
        return [
            Rule(predecessor=symbol, successor=option.successor, odds=option.odds)
            for symbol, options in self._groups.items()
            for option in options
        ]


def _select(options: Sequence[WeightedRule], rng: RandomSource) -> str:
    pick = rng.random()
    for option in options:
        if pick < option.probability:
            return option.successor
        pick -= option.probability
    # Rounding left the cumulative probability just under 1.
    return options[-1].successor


def rewrite(grammar: Grammar, text: str, rng: Optional[RandomSource] = None) -> str:
    """Rewrite every symbol of ``text`` once; symbols without rules are copied."""
    source = rng if rng is not None else random.Random()
    parts: List[str] = []
    for symbol in text:
        options = grammar.options(symbol)
        if not options:
            parts.append(symbol)
            continue
        parts.append(_select(options, source))
    return "".join(parts)


class LSystem:
    def __init__(
        self,
        axiom: str,
        grammar: Grammar,
        seed: int | None = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.axiom = axiom
        self.grammar = grammar
        self._random: RandomSource = rng if rng is not None else random.Random(seed)

    def advance(self, sequence: str) -> str:
        return rewrite(self.grammar, sequence, self._random)

    def expand(self, iterations: int, max_symbols: int | None = None) -> str:
        current = self.axiom
        for generation in range(max(iterations, 0)):
            current = self.advance(current)
            logger.debug("Generation %d has %d symbols", generation + 1, len(current))
            if max_symbols is not None and len(current) > max_symbols:
                raise SequenceTooLongError(
                    f"Generation {generation + 1} produced {len(current)} symbols "
                    f"(limit {max_symbols})."
                )
        return current
