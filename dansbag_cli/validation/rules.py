"""Rule descriptors and the rule catalog.

A Rule wraps one validator call plus the ids of the rules it depends on.
Rules never call each other; the RuleCatalog resolves the dependency graph
once, at construction, and fails fast on duplicate ids, unknown
dependencies and cycles.
"""

from __future__ import annotations

import heapq
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dansbag_cli.errors import DuplicateRuleError, RuleCycleError, UnknownDependencyError

if TYPE_CHECKING:
    from dansbag_cli.validation.context import ValidationContext
    from dansbag_cli.validation.results import RuleOutcome

Evaluator = Callable[["ValidationContext"], "RuleOutcome"]

_ID_TOKEN = re.compile(r"\d+|[^\d.()]+")


def rule_sort_key(rule_id: str) -> tuple[tuple[int, int | str], ...]:
    """Natural sort key for dotted rule numbers.

    "1.2" sorts before "1.10", and "2.2(a)" before "2.2(b)". Numeric parts
    sort before textual parts at the same position.
    """
    return tuple(
        (0, int(token)) if token.isdigit() else (1, token)
        for token in _ID_TOKEN.findall(rule_id)
    )


@dataclass(frozen=True)
class Rule:
    """A numbered compliance check.

    Attributes:
        id: Dotted rule number, e.g. "3.1.7".
        evaluate: Validator called with the run's context.
        depends_on: Ids of rules that must succeed before this one runs.
        description: Human-readable summary for --verbose output.
    """

    id: str
    evaluate: Evaluator = field(compare=False)
    depends_on: frozenset[str] = frozenset()
    description: str = ""


class RuleCatalog:
    """An immutable, dependency-ordered set of rules."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        by_id: dict[str, Rule] = {}
        for rule in rules:
            if rule.id in by_id:
                raise DuplicateRuleError(rule.id)
            by_id[rule.id] = rule

        for rule in by_id.values():
            for dependency in rule.depends_on:
                if dependency not in by_id:
                    raise UnknownDependencyError(rule.id, dependency)

        self._rules = by_id
        self._order: tuple[Rule, ...] = tuple(by_id[i] for i in _topological_order(by_id))
        self._position = {rule.id: n for n, rule in enumerate(self._order)}

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __getitem__(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    @property
    def ids(self) -> list[str]:
        """Rule ids in execution order."""
        return [rule.id for rule in self._order]

    def dependencies_in_order(self, rule: Rule) -> list[str]:
        """Dependencies of a rule, sorted by their execution position."""
        return sorted(rule.depends_on, key=self._position.__getitem__)


def _topological_order(rules: dict[str, Rule]) -> list[str]:
    """Kahn's algorithm with a heap so ties resolve by ascending rule id."""
    remaining = {rule_id: len(rule.depends_on) for rule_id, rule in rules.items()}
    dependents: dict[str, list[str]] = {rule_id: [] for rule_id in rules}
    for rule in rules.values():
        for dependency in rule.depends_on:
            dependents[dependency].append(rule.id)

    ready = [(rule_sort_key(i), i) for i, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        _, rule_id = heapq.heappop(ready)
        order.append(rule_id)
        for dependent in dependents[rule_id]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, (rule_sort_key(dependent), dependent))

    if len(order) != len(rules):
        stuck = sorted((i for i, count in remaining.items() if count > 0), key=rule_sort_key)
        raise RuleCycleError(stuck)
    return order
