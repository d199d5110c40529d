import logging
import os
import sys
import time
from datetime import datetime
from typing import Dict, List, Optional

from prefect import flow, task, get_run_logger

from . import dq
from . import io as io_utils
from .config import Settings, settings
from .schema import DEFAULT_REGISTRY, FileKind, SchemaRegistry
from .trace import Tracer, elapsed_since


VERBOSE_LOGS = os.getenv("VERBOSE_LOGS", "1").lower() in {"1", "true", "yes", "on"}

# Do not start Prefect's temporary API server when running locally unless explicitly enabled
os.environ.setdefault("PREFECT_API_SERVE", "false")


def _classify_error(exc: Exception) -> str:
    if isinstance(exc, dq.ColumnNotFoundError):
        return "missing_columns"
    if isinstance(exc, dq.HeaderValidationError):
        return "header_format_error"
    if isinstance(exc, io_utils.IOErrorWithContext):
        return "file_io_error"
    return "processing_error"


def _append_failure_log(
    source_file: str, kind: str, reason: str, details: str, cfg: Optional[Settings] = None
) -> None:
    cfg = cfg or settings
    try:
        os.makedirs(os.path.dirname(cfg.failure_log_file), exist_ok=True)
        ts = datetime.now(cfg.timezone).strftime("%Y-%m-%dT%H:%M:%S%z")
        line = f"[{ts}] file={source_file} kind={kind} reason={reason} details={details}\n"
        # Prepend new entries to keep latest on top
        try:
            with open(cfg.failure_log_file, "r", encoding="utf-8") as f:
                prev = f.read()
        except FileNotFoundError:
            prev = ""
        with open(cfg.failure_log_file, "w", encoding="utf-8") as f:
            f.write(line)
            if prev:
                f.write(prev)
    except OSError:
        # Never let logging failure break the flow
        logging.getLogger("simload").debug("Could not write failure log", exc_info=True)


def _unclaimed_files(input_dir: str, expected: Dict[FileKind, str]) -> List[str]:
    """Input-looking files in input_dir that no file kind is configured to read."""
    if not os.path.isdir(input_dir):
        return []
    claimed = {os.path.abspath(p) for p in expected.values()}
    return [p for p in io_utils.discover_files(input_dir) if p not in claimed]


def check_file(
    kind: FileKind,
    path: str,
    delimiter: str,
    tracer: Tracer,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dq.ValidationOutcome:
    """Validate one input file's header and trace the result."""
    validator = dq.HeaderValidator(registry.get(kind), sink=tracer)
    tracer.debug(f"Validating {kind.value} header of {path}")
    outcome = validator.validate(path, delimiter)
    named = sum(1 for c in outcome.columns if c)
    tracer.update(
        f"{kind.value} file {os.path.basename(path)}: header OK "
        f"({named} column{'' if named == 1 else 's'})"
    )
    return outcome


@task
def validate_input(
    kind: FileKind, path: str, delimiter: str, started_at: Optional[float] = None
) -> Dict[str, object]:
    # started_at is a time.monotonic() reading shared by every task of a run
    tracer = Tracer.from_settings(
        settings, log=get_run_logger(), time_source=elapsed_since(started_at)
    )
    outcome = check_file(kind, path, delimiter, tracer)
    return {
        "kind": kind.value,
        "path": path,
        "columns": list(outcome.columns),
        "unused": list(outcome.unused),
    }


@flow(name="validate_inputs")
def validate_inputs(input_dir: Optional[str] = None, delimiter: Optional[str] = None) -> bool:
    """Check every configured input file before a simulation run.

    Returns True when all headers satisfy their schemas. Failures are logged,
    recorded in the failure log, and reported together rather than stopping
    at the first bad file.
    """
    logger = get_run_logger()
    started_at = time.monotonic()
    delimiter = delimiter or settings.DELIMITER
    base_dir = os.path.abspath(input_dir) if input_dir else settings.input_dir
    files = settings.input_files(base_dir)
    logger.info("Validating input files in: %s", base_dir)

    failed = False
    for kind, path in files.items():
        source_file = os.path.basename(path)
        if not os.path.isfile(path):
            failed = True
            details = f"Input file not found: {path}"
            _append_failure_log(source_file, kind.value, "file_not_found", details, cfg=settings)
            logger.error("Missing %s input file: %s", kind.value, path)
            continue

        try:
            validate_input(kind, path, delimiter, started_at)
        except (dq.HeaderValidationError, io_utils.IOErrorWithContext) as exc:
            failed = True
            reason = _classify_error(exc)
            _append_failure_log(source_file, kind.value, reason, str(exc), cfg=settings)
            if VERBOSE_LOGS:
                logger.error("Rejected %s: %s", source_file, exc)
            else:
                logger.error("Rejected %s due to header validation.", source_file)

    for extra in _unclaimed_files(base_dir, files):
        logger.warning("Ignoring unrecognized input file: %s", os.path.basename(extra))

    return not failed


def _run_cli() -> None:
    input_dir = sys.argv[1] if len(sys.argv) > 1 else None
    ok = validate_inputs(input_dir)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    _run_cli()
