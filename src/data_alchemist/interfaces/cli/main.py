import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import colorlog

from data_alchemist.core.enums import DataType
from data_alchemist.errors import DataAlchemistError, SessionNotFoundError

try:
    from data_alchemist import __version__ as _PACKAGE_VERSION
except ImportError:  # pragma: no cover
    _PACKAGE_VERSION = "unknown"  # type: ignore[assignment]

DATA_TYPE_CHOICES = [dt.value for dt in DataType]
DEFAULT_SESSION_ROOT = Path("data/sessions")


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = (
        "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
    )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    stream_handler = colorlog.StreamHandler()
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _parse_today(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"--today must be YYYY-MM-DD, got {value!r}") from e


def _parse_value(raw: str):
    """Interpret a --value argument as JSON when possible, else as a plain string.

    ``--value 42`` writes the number 42, ``--value '"42"'`` the string "42",
    ``--value null`` clears the cell and ``--value Remote`` writes "Remote".
    """
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def _build_service(args: argparse.Namespace):
    """Create a service over the file store named by --session-root."""
    from data_alchemist.service import DataQualityService
    from data_alchemist.sessions.store import FileSessionStore
    from data_alchemist.validation.config import ValidationSettings

    settings = ValidationSettings()
    config_path = getattr(args, "config", None)
    if config_path:
        settings = ValidationSettings.from_yaml(Path(config_path))
    today = _parse_today(getattr(args, "today", None))
    store = FileSessionStore(Path(args.session_root or DEFAULT_SESSION_ROOT).resolve())
    return DataQualityService(store, settings=settings, today=today)


def cmd_load(args: argparse.Namespace) -> int:
    """Load dataset files into a session, creating the session if needed.

    Returns:
        0 if at least one dataset was loaded
        1 if none were given or loaded
        2 on invalid arguments
    """
    from data_alchemist.ingestion.loader import load_dataset

    inputs = [
        (DataType.CLIENTS, args.clients),
        (DataType.WORKERS, args.workers),
        (DataType.TASKS, args.tasks),
    ]
    if not any(path for _, path in inputs):
        logging.error("Provide at least one of --clients, --workers, --tasks")
        return 2

    try:
        service = _build_service(args)
        try:
            service.get_session(args.session_id)
        except SessionNotFoundError:
            service.create_session(args.session_id)
    except (DataAlchemistError, ValueError, OSError) as e:
        logging.error("Cannot open session %s: %s", args.session_id, e)
        return 2

    loaded = 0
    for data_type, path in inputs:
        if not path:
            continue
        try:
            dataset = load_dataset(Path(path), data_type)
        except FileNotFoundError as e:
            logging.warning("Skipping %s: %s", data_type.value, e)
            continue
        except ValueError as e:
            logging.error("Skipping %s: %s", data_type.value, e)
            continue
        try:
            service.add_dataset(args.session_id, dataset)
        except (DataAlchemistError, TypeError, ValueError, OSError) as e:
            logging.error("Cannot save %s to session %s: %s", data_type.value, args.session_id, e)
            continue
        loaded += 1

    if loaded == 0:
        logging.error("No datasets were loaded.")
        return 1
    logging.info("Loaded %d dataset(s) into session %s", loaded, args.session_id)
    return 0


def _write_report(target, session_id: str, suffix: str, content: str, session_root: Path) -> Path:
    if target is True:
        # Default location: inside the session directory
        report_dir = session_root / f"session_{session_id}"
    else:
        report_dir = Path(target)
    report_dir.mkdir(parents=True, exist_ok=True)
    report_path = report_dir / f"{session_id}_validation.{suffix}"
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(content)
    return report_path


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate every dataset of a session.

    Returns:
        0 if validation passed without errors
        1 if there was nothing to validate or the session is missing
        2 if any validation errors were found or arguments are invalid
    """
    from data_alchemist.validation.registry import print_report

    try:
        service = _build_service(args)
    except (FileNotFoundError, ValueError) as e:
        logging.error("Invalid configuration: %s", e)
        return 2

    try:
        summary = service.validate(args.session_id)
    except SessionNotFoundError as e:
        logging.error("%s", e)
        return 1
    except (DataAlchemistError, ValueError, OSError) as e:
        logging.error("Error validating session %s: %s", args.session_id, e)
        return 1

    if not summary.validated:
        logging.error("No datasets were validated.")
        return 1

    print_report(summary)

    session_root = Path(args.session_root or DEFAULT_SESSION_ROOT).resolve()
    if args.report:
        report_path = _write_report(
            args.report, args.session_id, "md", summary.to_markdown(), session_root
        )
        logging.info("Markdown report saved: %s", report_path)
    if args.report_json:
        report_path = _write_report(
            args.report_json, args.session_id, "json", summary.to_json(), session_root
        )
        logging.info("JSON report saved: %s", report_path)

    if summary.has_errors(strict=False):
        logging.error(
            "Validation found %d errors and %d warnings.",
            summary.total_errors,
            summary.total_warnings,
        )
        return 2
    logging.info("Validation passed with %d warnings.", summary.total_warnings)
    return 0


def cmd_autofix(args: argparse.Namespace) -> int:
    """Validate a session and apply every safe fix.

    Returns:
        0 if the run completed (whether or not anything was fixed)
        1 if the session is missing or has no data
        2 on invalid arguments
    """
    try:
        service = _build_service(args)
    except (FileNotFoundError, ValueError) as e:
        logging.error("Invalid configuration: %s", e)
        return 2

    try:
        summary = service.validate(args.session_id)
        if not summary.validated:
            logging.error("No datasets to fix.")
            return 1
        report = service.auto_fix(
            args.session_id, list(summary.all_errors), apply_to_all=bool(args.apply_to_all)
        )
    except SessionNotFoundError as e:
        logging.error("%s", e)
        return 1
    except (DataAlchemistError, ValueError, OSError) as e:
        logging.error("Auto-fix failed for session %s: %s", args.session_id, e)
        return 1

    for data_type, detail in report.details.items():
        logging.info(
            "%s: %d fixed, %d require manual review, %d already correct",
            data_type.value,
            detail.total_fixed,
            detail.total_require_manual,
            detail.total_already_correct,
        )
        for fix in detail.fixes:
            logging.debug(
                "  row %d %s: %r -> %r", fix.row, fix.column, fix.old_value, fix.new_value
            )
    print(report.message)
    return 0


def cmd_apply_fix(args: argparse.Namespace) -> int:
    """Write a chosen value into one cell, optionally to every matching row.

    Returns:
        0 if the value was applied (or the cell already held it)
        1 if the session or row is missing
        2 on invalid arguments
    """
    from data_alchemist.core.enums import Category, Severity
    from data_alchemist.validation.models import ValidationFinding

    if args.row < 0:
        logging.error("--row must be non-negative")
        return 2

    finding = ValidationFinding(
        category=Category(args.category),
        severity=Severity.MEDIUM,
        data_type=DataType(args.data_type),
        row=args.row,
        column=args.column,
        message="Manual correction",
    )
    try:
        service = _build_service(args)
        result = service.apply_fix(
            args.session_id, finding, _parse_value(args.value), bool(args.apply_to_all)
        )
    except SessionNotFoundError as e:
        logging.error("%s", e)
        return 1
    except (DataAlchemistError, ValueError) as e:
        logging.error("Cannot apply fix: %s", e)
        return 2

    if not result.success:
        logging.error("Row %d not found in %s", args.row, args.data_type)
        return 1
    print(f"Updated {result.affected_rows} row(s)")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Write every dataset of a session as CSV.

    Returns:
        0 if at least one dataset was exported
        1 if the session is missing or empty
    """
    from data_alchemist.ingestion.loader import export_dataset

    try:
        record = _build_service(args).get_session(args.session_id)
    except SessionNotFoundError as e:
        logging.error("%s", e)
        return 1
    except (DataAlchemistError, ValueError, OSError) as e:
        logging.error("Cannot read session %s: %s", args.session_id, e)
        return 1

    output_dir = Path(args.output_dir).resolve()
    exported = 0
    for data_type in DataType:
        dataset = record.dataset(data_type)
        if dataset is None:
            continue
        export_dataset(dataset, output_dir)
        exported += 1

    if exported == 0:
        logging.error("Session %s has no datasets to export.", args.session_id)
        return 1
    return 0


def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--session-id", required=True, help="Session to operate on")
    parser.add_argument(
        "--session-root",
        default=None,
        help="Directory holding session_<id>/session.json files (defaults to ./data/sessions)",
    )


def _add_validation_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--today",
        default=None,
        help="Reference date (YYYY-MM-DD) for past-deadline checks. Defaults to today.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file overriding business-rule thresholds",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="data-alchemist",
        description=f"Data Alchemist Tools (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_load = sub.add_parser("load", help="Load CSV/Excel files into a session")
    _add_session_args(p_load)
    p_load.add_argument("--clients", default=None, help="Clients CSV or Excel file")
    p_load.add_argument("--workers", default=None, help="Workers CSV or Excel file")
    p_load.add_argument("--tasks", default=None, help="Tasks CSV or Excel file")
    p_load.set_defaults(func=cmd_load)

    p_validate = sub.add_parser("validate", help="Validate the datasets of a session")
    _add_session_args(p_validate)
    _add_validation_args(p_validate)
    p_validate.add_argument(
        "--report",
        nargs="?",
        const=True,
        default=False,
        help="Generate detailed Markdown report. Optionally specify custom directory path.",
    )
    p_validate.add_argument(
        "--report-json",
        nargs="?",
        const=True,
        default=False,
        help="Generate detailed JSON report. Optionally specify custom directory path.",
    )
    p_validate.set_defaults(func=cmd_validate)

    p_autofix = sub.add_parser("autofix", help="Apply every safe fix to a session")
    _add_session_args(p_autofix)
    _add_validation_args(p_autofix)
    p_autofix.add_argument(
        "--apply-to-all",
        action="store_true",
        help="Propagate each fix to every row sharing the original value (never for duplicates)",
    )
    p_autofix.set_defaults(func=cmd_autofix)

    p_apply = sub.add_parser("apply-fix", help="Write a chosen value into one cell")
    _add_session_args(p_apply)
    p_apply.add_argument("--data-type", required=True, choices=DATA_TYPE_CHOICES)
    p_apply.add_argument("--row", required=True, type=int, help="0-based row index")
    p_apply.add_argument("--column", required=True, help="Column to write")
    p_apply.add_argument(
        "--value",
        required=True,
        help="Value to write, parsed as JSON when possible (42, true, null, \"text\")",
    )
    p_apply.add_argument(
        "--category",
        default="type",
        choices=["required", "type", "dateFormat", "booleanFormat", "duplicate"],
        help="Kind of defect being fixed. Duplicate fixes never propagate.",
    )
    p_apply.add_argument(
        "--apply-to-all",
        action="store_true",
        help="Also write the value to every row holding the same original value",
    )
    p_apply.set_defaults(func=cmd_apply_fix)

    p_export = sub.add_parser("export", help="Export the datasets of a session as CSV")
    _add_session_args(p_export)
    p_export.add_argument("--output-dir", required=True, help="Directory for the CSV files")
    p_export.set_defaults(func=cmd_export)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
