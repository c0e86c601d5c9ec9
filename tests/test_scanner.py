"""Tests for the scan service and its state machine."""

import asyncio
import threading
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest

from driver_scan.exceptions import RecognitionError, ScanInProgressError
from driver_scan.matching.matcher import MatchMethod
from driver_scan.ocr.tesseract_engine import OCRResult
from driver_scan.rules.table import EMPTY_TABLE
from driver_scan.scanner import (
    ScanService,
    ScanState,
    ScanStatus,
    build_service,
)
from driver_scan.utils.config import AppConfig, MatchingConfig


def _make_reader(text: str = "해운대 우동 123", confidence: float = 0.9) -> MagicMock:
    """Create a mock LabelReader returning fixed OCR text."""
    reader = MagicMock()
    reader.load_image.return_value = np.zeros((10, 10, 3), dtype=np.uint8)
    reader.recognize.return_value = OCRResult(
        raw_text=text, text=text, language="kor+eng", confidence=confidence
    )
    return reader


def _make_service(
    rules_file: Path, reader: MagicMock | None = None, **matching: object
) -> ScanService:
    config = AppConfig(matching=MatchingConfig(rules_path=str(rules_file), **matching))
    service = ScanService(config, reader=reader or _make_reader())
    service.reload_rules()
    return service


class TestReloadRules:
    """Tests for rule table loading in the service."""

    def test_loads_configured_table(self, rules_file: Path) -> None:
        service = _make_service(rules_file)
        assert len(service.table) == 2
        assert service.table_warning is None

    def test_missing_table_leaves_empty_table_and_warning(self, tmp_path: Path) -> None:
        service = _make_service(tmp_path / "missing.csv")
        assert service.table is EMPTY_TABLE
        assert service.table_warning is not None

    def test_failed_reload_replaces_previous_table(
        self, rules_file: Path, tmp_path: Path
    ) -> None:
        service = _make_service(rules_file)
        service.reload_rules(tmp_path / "missing.csv")
        assert len(service.table) == 0
        assert service.table_warning is not None

    def test_successful_reload_clears_warning(
        self, rules_file: Path, tmp_path: Path
    ) -> None:
        service = _make_service(tmp_path / "missing.csv")
        service.reload_rules(rules_file)
        assert len(service.table) == 2
        assert service.table_warning is None

    def test_build_service_uses_override_path(self, rules_file: Path) -> None:
        service = build_service(AppConfig(), rules_file)
        assert len(service.table) == 2


class TestMatchText:
    """Tests for ScanService.match_text."""

    def test_matched(self, rules_file: Path) -> None:
        result = _make_service(rules_file).match_text("부산 해운대 우동 1")
        assert result.status == ScanStatus.MATCHED
        assert result.assignee == "김철수"
        assert result.method == MatchMethod.EXACT

    def test_unmatched(self, rules_file: Path) -> None:
        result = _make_service(rules_file).match_text("서울 강남구")
        assert result.status == ScanStatus.UNMATCHED
        assert result.assignee is None
        assert result.rule is None

    def test_empty_text_is_recognition_failure(self, rules_file: Path) -> None:
        result = _make_service(rules_file).match_text("   ")
        assert result.status == ScanStatus.RECOGNITION_FAILED

    def test_anchors_from_config(self, rules_file: Path) -> None:
        service = _make_service(rules_file, anchors=["물류"])
        result = service.match_text("센텀시티 물류 해운대 우동")
        assert result.focus_text == "해운대 우동"
        assert result.assignee == "김철수"

    def test_normalize_disabled_from_config(self, rules_file: Path) -> None:
        service = _make_service(rules_file, normalize=False)
        assert service.match_text("해운대우동").status == ScanStatus.UNMATCHED

    def test_table_warning_carried_into_results(self, tmp_path: Path) -> None:
        service = _make_service(tmp_path / "missing.csv")
        result = service.match_text("해운대 우동")
        assert result.status == ScanStatus.UNMATCHED
        assert result.table_warning == service.table_warning


class TestScan:
    """Tests for the asynchronous scan pipeline."""

    def test_scan_matched(self, rules_file: Path) -> None:
        service = _make_service(rules_file)
        result = asyncio.run(service.scan(b"image"))

        assert result.status == ScanStatus.MATCHED
        assert result.assignee == "김철수"
        assert result.confidence == 0.9
        assert service.state == ScanState.MATCHED
        assert service.busy is False

    def test_scan_unmatched(self, rules_file: Path) -> None:
        service = _make_service(rules_file, reader=_make_reader("서울 강남구"))
        result = asyncio.run(service.scan(b"image"))

        assert result.status == ScanStatus.UNMATCHED
        assert service.state == ScanState.UNMATCHED

    def test_scan_no_text(self, rules_file: Path) -> None:
        service = _make_service(rules_file, reader=_make_reader(""))
        result = asyncio.run(service.scan(b"image"))

        assert result.status == ScanStatus.RECOGNITION_FAILED
        assert service.state == ScanState.IDLE

    def test_scan_recognizes_loaded_image(self, rules_file: Path) -> None:
        reader = _make_reader()
        service = _make_service(rules_file, reader=reader)
        asyncio.run(service.scan(b"image"))

        reader.load_image.assert_called_once_with(b"image")
        reader.recognize.assert_called_once_with(reader.load_image.return_value)

    def test_scan_runs_blocking_steps_off_event_loop(self, rules_file: Path) -> None:
        reader = _make_reader()
        image = reader.load_image.return_value
        ocr_result = reader.recognize.return_value
        seen: dict[str, tuple[int, ScanState]] = {}
        service = _make_service(rules_file, reader=reader)

        def _load(source: bytes) -> np.ndarray:
            seen["load"] = (threading.get_ident(), service.state)
            return image

        def _recognize(img: np.ndarray) -> OCRResult:
            seen["recognize"] = (threading.get_ident(), service.state)
            return ocr_result

        reader.load_image.side_effect = _load
        reader.recognize.side_effect = _recognize

        async def _scan() -> int:
            await service.scan(b"image")
            return threading.get_ident()

        loop_thread = asyncio.run(_scan())
        assert seen["load"][0] != loop_thread
        assert seen["recognize"][0] != loop_thread
        assert seen["load"][1] == ScanState.CAPTURING
        assert seen["recognize"][1] == ScanState.RECOGNIZING

    def test_scan_error_returns_to_idle(self, rules_file: Path) -> None:
        reader = _make_reader()
        reader.recognize.side_effect = RecognitionError("OCR failed")
        service = _make_service(rules_file, reader=reader)

        with pytest.raises(RecognitionError):
            asyncio.run(service.scan(b"image"))
        assert service.state == ScanState.IDLE
        assert service.busy is False

    def test_scan_rejected_while_busy(self, rules_file: Path) -> None:
        reader = _make_reader()
        service = _make_service(rules_file, reader=reader)
        service._busy = True

        with pytest.raises(ScanInProgressError):
            asyncio.run(service.scan(b"image"))
        reader.load_image.assert_not_called()

    def test_concurrent_scan_rejected(self, rules_file: Path) -> None:
        service = _make_service(rules_file)

        async def _run_two() -> list[object]:
            return await asyncio.gather(
                service.scan(b"first"), service.scan(b"second"), return_exceptions=True
            )

        outcomes = asyncio.run(_run_two())
        assert outcomes[0].status == ScanStatus.MATCHED
        assert isinstance(outcomes[1], ScanInProgressError)

    def test_reset_returns_to_idle(self, rules_file: Path) -> None:
        service = _make_service(rules_file)
        asyncio.run(service.scan(b"image"))
        service.reset()
        assert service.state == ScanState.IDLE
