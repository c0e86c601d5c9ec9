"""Scan service: load rules once, then read labels and resolve drivers.

Owns the rule table lifecycle and the scan state machine::

    IDLE -> CAPTURING -> RECOGNIZING -> MATCHING -> MATCHED | UNMATCHED -> IDLE

Only one scan runs at a time; a second request while one is in flight is
rejected rather than queued.
"""

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from driver_scan.exceptions import ScanInProgressError, TableLoadError
from driver_scan.matching.matcher import MatchMethod, MatchStrategy, apply_strategy
from driver_scan.ocr.label_reader import LabelReader
from driver_scan.rules.table import EMPTY_TABLE, Rule, RuleTable, load_table
from driver_scan.utils.config import AppConfig
from driver_scan.utils.logger import get_logger

logger = get_logger(__name__)


class ScanState(StrEnum):
    """Stages of a label scan."""

    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    MATCHING = "matching"
    MATCHED = "matched"
    UNMATCHED = "unmatched"


class ScanStatus(StrEnum):
    """Outcome of a scan as shown to the user."""

    MATCHED = "matched"
    UNMATCHED = "unmatched"
    RECOGNITION_FAILED = "recognition_failed"


@dataclass
class ScanResult:
    """Outcome of matching one piece of recognized text."""

    status: ScanStatus
    recognized_text: str
    focus_text: str
    rule: Rule | None = None
    method: MatchMethod | None = None
    confidence: float | None = None
    table_warning: str | None = None

    @property
    def assignee(self) -> str | None:
        return self.rule.assignee if self.rule else None


class ScanService:
    """Application service tying the rule table, OCR and matcher together.

    Args:
        config: Application configuration object.
        reader: Label reader to use; built from ``config`` when omitted.
    """

    def __init__(self, config: AppConfig, reader: LabelReader | None = None) -> None:
        self.config = config
        self.reader = reader or LabelReader(config)
        self.strategy = MatchStrategy.from_values(
            config.matching.anchors, config.matching.normalize
        )
        self.table: RuleTable = EMPTY_TABLE
        self.table_warning: str | None = None
        self.state = ScanState.IDLE
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def reload_rules(self, path: Path | None = None) -> RuleTable:
        """Load the rule table, replacing the current one.

        On failure the table is emptied and ``table_warning`` is set, so
        every subsequent scan ends unmatched until a reload succeeds.

        Args:
            path: Rule file to load. Defaults to the configured path.

        Returns:
            The table now in use.
        """
        path = path or Path(self.config.matching.rules_path)
        try:
            self.table = load_table(
                path,
                header_marker=self.config.matching.header_marker,
                delimiter=self.config.matching.delimiter,
            )
            self.table_warning = None
        except TableLoadError as exc:
            logger.error("Rule table unavailable: %s", exc)
            self.table = EMPTY_TABLE
            self.table_warning = str(exc)
        return self.table

    def match_text(self, text: str, confidence: float | None = None) -> ScanResult:
        """Resolve already-recognized text to a driver.

        Args:
            text: Recognized text.
            confidence: OCR confidence to carry into the result.

        Returns:
            Scan result. Empty text yields ``RECOGNITION_FAILED``.
        """
        if not text.strip():
            return ScanResult(
                status=ScanStatus.RECOGNITION_FAILED,
                recognized_text=text,
                focus_text="",
                confidence=confidence,
                table_warning=self.table_warning,
            )

        focus, result = apply_strategy(text, self.table, self.strategy)
        if result is None:
            return ScanResult(
                status=ScanStatus.UNMATCHED,
                recognized_text=text,
                focus_text=focus,
                confidence=confidence,
                table_warning=self.table_warning,
            )
        return ScanResult(
            status=ScanStatus.MATCHED,
            recognized_text=text,
            focus_text=focus,
            rule=result.rule,
            method=result.method,
            confidence=confidence,
            table_warning=self.table_warning,
        )

    async def scan(self, source: Path | bytes, filename: str = "label") -> ScanResult:
        """Read a label image and resolve it to a driver.

        Args:
            source: Image file path or raw image bytes.
            filename: Display name for logging.

        Returns:
            Scan result.

        Raises:
            ScanInProgressError: If another scan is running.
            RecognitionError: If the image cannot be read or OCR fails.
        """
        if self._busy:
            raise ScanInProgressError("A scan is already in progress")

        self._busy = True
        try:
            self.state = ScanState.CAPTURING
            image = await asyncio.to_thread(self.reader.load_image, source)

            self.state = ScanState.RECOGNIZING
            ocr_result = await asyncio.to_thread(self.reader.recognize, image)

            self.state = ScanState.MATCHING
            result = self.match_text(ocr_result.text, ocr_result.confidence)
        except Exception:
            self.state = ScanState.IDLE
            raise
        finally:
            self._busy = False

        if result.status == ScanStatus.MATCHED:
            self.state = ScanState.MATCHED
        elif result.status == ScanStatus.UNMATCHED:
            self.state = ScanState.UNMATCHED
        else:
            self.state = ScanState.IDLE

        logger.info("Scan of %s finished: %s", filename, result.status.value)
        return result

    def reset(self) -> None:
        """Return to the idle state after a result has been shown."""
        self.state = ScanState.IDLE


def build_service(config: AppConfig, rules_path: Path | None = None) -> ScanService:
    """Create a scan service and load its rule table.

    Args:
        config: Application configuration object.
        rules_path: Optional rule file overriding the configured path.

    Returns:
        Ready-to-use scan service.
    """
    service = ScanService(config)
    service.reload_rules(rules_path)
    return service
