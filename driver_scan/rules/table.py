"""Keyword-to-driver rule table loading.

Parses the two-column ``keyword,driver`` text format into an ordered,
immutable rule table. Order matters: matching is first-match, so rules
are kept exactly as they appear in the source, duplicates included.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from driver_scan.exceptions import TableLoadError
from driver_scan.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEADER_MARKER = "키워드"
DEFAULT_DELIMITER = ","

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Rule:
    """A single keyword and the driver assigned to it."""

    keyword: str
    assignee: str


@dataclass(frozen=True)
class RuleTable:
    """Ordered, read-only sequence of rules."""

    rules: tuple[Rule, ...] = ()

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> Rule:
        return self.rules[index]


EMPTY_TABLE = RuleTable()


def parse_table(
    raw: str,
    header_marker: str = DEFAULT_HEADER_MARKER,
    delimiter: str = DEFAULT_DELIMITER,
) -> RuleTable:
    """Parse delimited ``keyword,driver`` text into a rule table.

    The first line is treated as a header and skipped when it contains
    ``header_marker``. Blank lines, lines with fewer than two fields and
    lines with an empty keyword or driver are dropped. Fields after the
    second are ignored.

    Args:
        raw: Full text of the rule resource.
        header_marker: Token identifying the optional header line.
        delimiter: Single field separator character.

    Returns:
        Rules in source order.
    """
    lines = _LINE_BREAK.split(raw)

    start = 0
    if lines and header_marker and header_marker in lines[0]:
        start = 1

    rules: list[Rule] = []
    for line_no, line in enumerate(lines[start:], start + 1):
        line = line.strip()
        if not line:
            continue

        parts = line.split(delimiter)
        if len(parts) < 2:
            logger.debug("Skipping line %d: fewer than two fields", line_no)
            continue

        keyword = parts[0].strip()
        assignee = parts[1].strip()
        if not keyword or not assignee:
            logger.debug("Skipping line %d: empty keyword or driver", line_no)
            continue

        rules.append(Rule(keyword=keyword, assignee=assignee))

    return RuleTable(tuple(rules))


def load_table(
    path: Path,
    header_marker: str = DEFAULT_HEADER_MARKER,
    delimiter: str = DEFAULT_DELIMITER,
) -> RuleTable:
    """Read and parse a rule table file.

    Args:
        path: Path to the UTF-8 rule file (a byte-order mark is tolerated).
        header_marker: Token identifying the optional header line.
        delimiter: Single field separator character.

    Returns:
        Parsed rule table.

    Raises:
        TableLoadError: If the file cannot be read or is empty.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise TableLoadError(f"Failed to read rule table {path}: {exc}") from exc

    if not raw.strip():
        raise TableLoadError(f"Rule table {path} is empty")

    table = parse_table(raw, header_marker=header_marker, delimiter=delimiter)
    logger.info("Loaded %d rules from %s", len(table), path)
    return table
