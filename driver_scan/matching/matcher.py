"""Keyword matching of recognized text against the rule table.

Matching is first-match in table order, in two passes: a literal
substring pass over the whole table, then (optionally) the same test on
text and keywords with spacing and punctuation removed. There is no
scoring; a later exact match always beats an earlier normalized one.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from driver_scan.rules.table import Rule, RuleTable
from driver_scan.utils.logger import get_logger

from .anchor import extract_focus

logger = get_logger(__name__)

_NORMALIZE_PATTERN = re.compile(r"[\s.\-,]+")


class MatchMethod(StrEnum):
    """Which matching pass produced a rule."""

    EXACT = "exact"
    NORMALIZED = "normalized"


@dataclass(frozen=True)
class RuleMatch:
    """A matched rule and the pass that found it."""

    rule: Rule
    method: MatchMethod


@dataclass(frozen=True)
class MatchStrategy:
    """Matching options.

    ``anchors=()`` with ``normalize=False`` is the plain exact matcher;
    anchors with ``normalize=True`` is the two-pass anchored matcher.
    """

    anchors: tuple[str, ...] = ()
    normalize: bool = True

    @classmethod
    def from_values(cls, anchors: Sequence[str], normalize: bool) -> "MatchStrategy":
        return cls(anchors=tuple(anchors), normalize=normalize)


def normalize_text(text: str) -> str:
    """Remove whitespace, periods, hyphens and commas from ``text``."""
    return _NORMALIZE_PATTERN.sub("", text)


def _match_exact(text: str, table: RuleTable) -> Rule | None:
    for rule in table:
        if rule.keyword in text:
            return rule
    return None


def _match_normalized(text: str, table: RuleTable) -> Rule | None:
    normalized = normalize_text(text)
    if not normalized:
        return None
    for rule in table:
        keyword = normalize_text(rule.keyword)
        # A keyword made only of separators would match anything.
        if keyword and keyword in normalized:
            return rule
    return None


def find_match(
    text: str | None, table: RuleTable, normalize: bool = True
) -> RuleMatch | None:
    """Find the first qualifying rule and report which pass matched.

    Args:
        text: Text to search. Empty or ``None`` never matches.
        table: Rules in priority order.
        normalize: Whether to run the normalized fallback pass.

    Returns:
        The match, or ``None`` if no rule applies.
    """
    if not text or not table:
        return None

    rule = _match_exact(text, table)
    if rule is not None:
        return RuleMatch(rule=rule, method=MatchMethod.EXACT)

    if normalize:
        rule = _match_normalized(text, table)
        if rule is not None:
            return RuleMatch(rule=rule, method=MatchMethod.NORMALIZED)

    return None


def match(text: str | None, table: RuleTable, normalize: bool = True) -> Rule | None:
    """Return the first rule whose keyword occurs in ``text``, or ``None``."""
    result = find_match(text, table, normalize=normalize)
    return result.rule if result else None


def apply_strategy(
    text: str | None, table: RuleTable, strategy: MatchStrategy
) -> tuple[str, RuleMatch | None]:
    """Narrow ``text`` with the strategy's anchors and match the result.

    Args:
        text: Recognized text.
        table: Rules in priority order.
        strategy: Anchors and normalization setting.

    Returns:
        Tuple of (focus_text, match). ``focus_text`` is the text actually
        searched.
    """
    focus = extract_focus(text or "", strategy.anchors)
    result = find_match(focus, table, normalize=strategy.normalize)

    if result:
        logger.info(
            "Matched keyword '%s' -> %s (%s)",
            result.rule.keyword,
            result.rule.assignee,
            result.method.value,
        )
    else:
        logger.info("No rule matched %d characters of text", len(focus))
    return focus, result
