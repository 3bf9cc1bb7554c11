"""Skill classification -- map free text to at most one skill tag.

Classification is a first-match-wins scan over an ordered list of keyword
rules.  A message that mentions both a balance term and a price term is
always a ``BALANCE_CHECKER`` request because the balance rule comes first.
Keywords are matched as lower-case substrings, so stems such as ``"цен"``
cover every inflection (``цена``, ``цену``, ``цены``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SkillTag(str, enum.Enum):
    """Closed set of skill tags; ``NONE`` means free-form completion."""

    BALANCE_CHECKER = "Balance Checker"
    TRANSACTION_ANALYZER = "Transaction Analyzer"
    PRICE_MONITOR = "Price Monitor"
    NETWORK_STATUS = "Network Status"
    NONE = ""

    def __bool__(self) -> bool:
        return self is not SkillTag.NONE


@dataclass(frozen=True)
class SkillRule:
    tag: SkillTag
    keywords: tuple[str, ...]

    def matches(self, text_lower: str) -> bool:
        return any(kw in text_lower for kw in self.keywords)


# ---------------------------------------------------------------------------
# Default rules (order is significant)
# ---------------------------------------------------------------------------

DEFAULT_RULES: tuple[SkillRule, ...] = (
    SkillRule(
        SkillTag.BALANCE_CHECKER,
        ("баланс", "balance", "wallet", "кошелек", "кошелёк"),
    ),
    SkillRule(
        SkillTag.TRANSACTION_ANALYZER,
        ("транзакц", "transaction", "история", "history", "/tx"),
    ),
    SkillRule(
        SkillTag.PRICE_MONITOR,
        ("цен", "price", "курс"),
    ),
    SkillRule(
        SkillTag.NETWORK_STATUS,
        ("сеть", "network", "статус", "status", "slot"),
    ),
)


class SkillClassifier:
    """Stateless, order-deterministic skill classifier.

    Parameters
    ----------
    rules:
        Ordered keyword rules.  Defaults to :data:`DEFAULT_RULES`.
    """

    def __init__(self, rules: tuple[SkillRule, ...] | None = None) -> None:
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES
        for rule in self._rules:
            if rule.tag is SkillTag.NONE:
                raise ValueError("A rule cannot resolve to SkillTag.NONE")

    @property
    def rules(self) -> tuple[SkillRule, ...]:
        return self._rules

    def classify(self, text: str) -> SkillTag:
        """Return the tag of the first matching rule, or ``SkillTag.NONE``."""
        lower = text.lower()
        for rule in self._rules:
            if rule.matches(lower):
                return rule.tag
        return SkillTag.NONE

    def __call__(self, text: str) -> SkillTag:
        return self.classify(text)


def classify_skill(text: str) -> SkillTag:
    """Classify *text* with the default rule set."""
    return _default_classifier.classify(text)


_default_classifier = SkillClassifier()
