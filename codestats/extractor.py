from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Pattern, Sequence, Union

from bs4 import BeautifulSoup

_SPACE_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"[^0-9]")


def strip_tags(value: str) -> str:
    """Reduce a markup fragment to its visible text, entities decoded."""
    soup = BeautifulSoup(value, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return _SPACE_RE.sub(" ", soup.get_text(separator=" ")).strip()


@dataclass(frozen=True)
class Rule:
    """One candidate way of locating a field in a page.

    kind:
        int   -- first capture group, all non-digits stripped, parsed as int
        text  -- first capture group (or the whole match) cleaned of markup;
                 ``strip_prefix`` removes a leading label such as "Rank"
        count -- number of occurrences of ``symbol`` in the first capture group
    """

    pattern: Union[str, Pattern[str]]
    kind: str = "int"
    strip_prefix: Optional[str] = None
    symbol: Optional[str] = None

    def compiled(self) -> Pattern[str]:
        if isinstance(self.pattern, str):
            return re.compile(self.pattern, re.IGNORECASE)
        return self.pattern

    def apply(self, html: str) -> Any:
        match = self.compiled().search(html)
        if not match:
            return None
        captured = match.group(1) if match.groups() else match.group(0)
        if captured is None:
            return None

        if self.kind == "int":
            digits = _NON_DIGIT_RE.sub("", captured)
            return int(digits) if digits else None
        if self.kind == "text":
            text = strip_tags(captured)
            if self.strip_prefix:
                text = re.sub(rf"^{re.escape(self.strip_prefix)}\s*", "", text, flags=re.IGNORECASE).strip()
            return text or None
        if self.kind == "count":
            count = captured.count(self.symbol or "")
            return count if count > 0 else None
        raise ValueError(f"Unknown rule kind: {self.kind}")


class PatternExtractor:
    """Evaluates a field -> ordered rules table against raw markup.

    For each field the first rule that yields a value wins; fields with no
    matching rule are left out of the result entirely."""

    def __init__(self, rules: Mapping[str, Sequence[Rule]]) -> None:
        self._rules = {name: tuple(candidates) for name, candidates in rules.items()}

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def extract(self, html: str) -> Dict[str, Any]:
        found: Dict[str, Any] = {}
        for name, candidates in self._rules.items():
            value = first_match(html, candidates)
            if value is not None:
                found[name] = value
        return found


def first_match(html: str, rules: Sequence[Rule]) -> Any:
    for rule in rules:
        value = rule.apply(html)
        if value is not None:
            return value
    return None
