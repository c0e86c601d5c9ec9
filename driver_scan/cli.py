"""Command-line interface for scanning labels and checking the rule table.

Provides subcommands to scan label images, match a piece of text directly,
and list the loaded rules.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from driver_scan.rules.table import RuleTable
from driver_scan.scanner import ScanResult, ScanService, build_service
from driver_scan.utils.config import AppConfig, load_config
from driver_scan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_NO_MATCH_LABEL = "담당자 없음"
_NO_TEXT_LABEL = "텍스트 인식 실패"


def _result_to_dict(result: ScanResult, source: str | None = None) -> dict[str, object]:
    """Convert a scan result into a JSON-serializable dict.

    Args:
        result: Scan result to convert.
        source: Image file name, if the result came from a scan.

    Returns:
        Dictionary of result fields.
    """
    data: dict[str, object] = {
        "status": result.status.value,
        "assignee": result.assignee,
        "keyword": result.rule.keyword if result.rule else None,
        "method": result.method.value if result.method else None,
        "recognized_text": result.recognized_text,
        "focus_text": result.focus_text,
        "confidence": result.confidence,
    }
    if source is not None:
        data = {"source": source, **data}
    if result.table_warning:
        data["table_warning"] = result.table_warning
    return data


def _format_result(result: ScanResult) -> str:
    """Render a scan result as one human-readable line."""
    if result.rule:
        return f"{result.rule.assignee} (keyword: {result.rule.keyword})"
    if not result.recognized_text.strip():
        return _NO_TEXT_LABEL
    return _NO_MATCH_LABEL


def scan_files(
    service: ScanService, files: list[Path]
) -> tuple[list[dict[str, object]], int]:
    """Scan each image file in turn.

    Args:
        service: Scan service with rules loaded.
        files: Image files to scan.

    Returns:
        Tuple of (per-file result dicts, number of files that failed).
    """
    results: list[dict[str, object]] = []
    failed = 0

    for file_path in files:
        try:
            result = asyncio.run(service.scan(file_path, file_path.name))
            results.append(_result_to_dict(result, file_path.name))
        except Exception as exc:
            logger.error("Failed to scan %s: %s", file_path.name, exc)
            results.append(
                {"source": file_path.name, "status": "error", "error": str(exc)}
            )
            failed += 1
        finally:
            service.reset()

    return results, failed


def _print_rules(table: RuleTable, warning: str | None) -> None:
    if warning:
        print(f"Warning: {warning}", file=sys.stderr)
    for i, rule in enumerate(table, 1):
        print(f"{i:>4}  {rule.keyword}\t{rule.assignee}")
    print(f"{len(table)} rules")


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Apply command-line matching overrides to the loaded configuration."""
    matching = config.matching.model_copy()
    if args.anchor:
        matching.anchors = list(args.anchor)
    if args.no_normalize:
        matching.normalize = False
    return config.model_copy(update={"matching": matching})


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Parcel label driver lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")
    parser.add_argument("-r", "--rules", type=Path, help="Rule table file")
    parser.add_argument(
        "-a",
        "--anchor",
        action="append",
        help="Anchor phrase, highest priority first (repeatable)",
    )
    parser.add_argument(
        "--no-normalize",
        action="store_true",
        help="Only match keywords literally",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan label images")
    scan_parser.add_argument("files", type=Path, nargs="+", help="Image files")

    match_parser = subparsers.add_parser("match", help="Match text directly")
    match_parser.add_argument("text", help="Recognized label text")

    subparsers.add_parser("rules", help="List loaded rules")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = _apply_overrides(load_config(args.config), args)
    setup_logging(config.log_level, stream=sys.stderr)
    service = build_service(config, args.rules)

    if args.command == "rules":
        if args.json:
            print(
                json.dumps(
                    [
                        {"keyword": r.keyword, "assignee": r.assignee}
                        for r in service.table
                    ],
                    ensure_ascii=False,
                    indent=2,
                )
            )
        else:
            _print_rules(service.table, service.table_warning)
        return

    if args.command == "match":
        result = service.match_text(args.text)
        if args.json:
            print(json.dumps(_result_to_dict(result), ensure_ascii=False, indent=2))
        else:
            print(_format_result(result))
        return

    missing = [f for f in args.files if not f.exists()]
    if missing:
        print(f"Error: {missing[0]} does not exist", file=sys.stderr)
        sys.exit(1)

    results, failed = scan_files(service, args.files)
    if args.json:
        print(json.dumps(results, ensure_ascii=False, indent=2))
    else:
        for item in results:
            if item["status"] == "recognition_failed":
                label = _NO_TEXT_LABEL
            else:
                label = item.get("assignee") or item.get("error") or _NO_MATCH_LABEL
            print(f"{item['source']}: {label}")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
