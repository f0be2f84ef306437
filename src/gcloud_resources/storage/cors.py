"""Builder for bucket CORS configurations."""

import copy
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

# Defaults applied by add_rule
DEFAULT_MAX_AGE = 1800

FrozenRules = tuple[Mapping[str, Any], ...]


def freeze_rules(rules: Iterable[Mapping[str, Any]]) -> FrozenRules:
    """Return read-only copies of CORS rules (mappings with tuple sequences)."""
    return tuple(
        MappingProxyType(
            {
                key: tuple(value) if isinstance(value, (list, tuple)) else value
                for key, value in rule.items()
            }
        )
        for rule in rules
    )


def thaw_rules(rules: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Return plain JSON-ready copies of CORS rules (frozen or not)."""
    return [
        {
            key: list(value) if isinstance(value, (list, tuple)) else copy.deepcopy(value)
            for key, value in rule.items()
        }
        for rule in rules
    ]


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class CorsBuilder:
    """Ordered CORS rules for a bucket.

    Example:
        with bucket.cors_builder() as cors:
            cors.add_rule(["http://example.org", "https://example.org"],
                          "*",
                          headers=["X-My-Custom-Header"],
                          max_age=300)

    Rules can be removed with pop(), remove_if(), clear() or del, and
    existing rules can be edited in place. ``changed`` reports whether the
    rules differ from what the builder started with.
    """

    def __init__(self, rules: Iterable[Mapping[str, Any]] | None = None) -> None:
        self._rules = thaw_rules(rules or [])
        self._original = copy.deepcopy(self._rules)

    @property
    def changed(self) -> bool:
        return self._rules != self._original

    def add_rule(
        self,
        origin: str | list[str],
        methods: str | list[str],
        headers: str | list[str] | None = None,
        max_age: int | None = None,
    ) -> dict[str, Any]:
        """Append a rule.

        Args:
            origin: Allowed origin(s); "*" means any origin.
            methods: Allowed HTTP method(s); "*" means any method.
            headers: Response header(s) the browser may share.
            max_age: Seconds a preflight response may be cached (default 1800).

        Returns:
            The appended rule.
        """
        rule = {
            "origin": _as_list(origin),
            "method": _as_list(methods),
            "responseHeader": _as_list(headers),
            "maxAgeSeconds": DEFAULT_MAX_AGE if max_age is None else max_age,
        }
        self._rules.append(rule)
        return rule

    def pop(self, index: int = -1) -> dict[str, Any]:
        return self._rules.pop(index)

    def remove_if(self, predicate: Callable[[dict[str, Any]], bool]) -> None:
        """Remove every rule for which the predicate is true."""
        self._rules[:] = [rule for rule in self._rules if not predicate(rule)]

    def clear(self) -> None:
        self._rules.clear()

    def __getitem__(self, index: int) -> dict[str, Any]:
        return self._rules[index]

    def __delitem__(self, index: int) -> None:
        del self._rules[index]

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def to_list(self) -> list[dict[str, Any]]:
        """Plain copies of the rules, ready to send."""
        return thaw_rules(self._rules)

    def build(self) -> FrozenRules:
        """Return the rules as an immutable value."""
        return freeze_rules(self._rules)
