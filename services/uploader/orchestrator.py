"""
Batch Orchestrator

Drives one import run: files, then the records in each file, in a single
sequential pass.

    source dir -> list JSON files -> (confirm) -> open sink
        for each file:   read -> parse JSON -> records
            for each record: validate -> normalize -> write (unless dry run)
    -> close sink -> BatchResult

Failure isolation:
- A record that fails validation, normalization or the write is recorded in
  the BatchResult and skipped; the rest of the file is still processed.
- A file that cannot be read or parsed is recorded and skipped; the next file
  is still processed.
- Only startup conditions (missing directory, no JSON files, cancelled
  confirmation, unreachable sink) abort the run, via FatalUploadError.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .base import ConsolePrompter, FileSystem, Prompter, PublicationSink
from .categories import collection_for
from .category_detector import detect_category
from .config_loader import UploaderConfig
from .normalize import NormalizationError, normalize_publication
from .slug_generator import ShortIdGenerator
from .validator import validate_publication

logger = logging.getLogger(__name__)

UNTITLED = 'Untitled'


class FatalUploadError(Exception):
    """Raised when the whole run must stop (nothing further is processed)."""
    pass


@dataclass
class BatchError:
    """One failed record, or one failed file (title is None)."""

    file: str
    title: Optional[str]
    message: str


@dataclass
class BatchResult:
    """Summary of one import run."""

    total: int = 0
    success: int = 0
    skipped: int = 0
    errors: list[BatchError] = field(default_factory=list)

    def add_error(self, file: str, title: Optional[str], message: str) -> None:
        self.errors.append(BatchError(file=file, title=title, message=message))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def run_uploader(
    source_dir: str,
    file_system: FileSystem,
    sink: Optional[PublicationSink] = None,
    prompter: Optional[Prompter] = None,
    config: Optional[UploaderConfig] = None,
    dry_run: bool = False,
    force: bool = False,
    detect_missing_category: bool = False,
    short_ids: Optional[ShortIdGenerator] = None
) -> BatchResult:
    """
    Import every JSON file of a directory.

    Args:
        source_dir: Directory holding the JSON files
        file_system: File access
        sink: Publication store; required unless dry_run
        prompter: Confirmation gate used when neither dry_run nor force is set
                  (reads standard input when None)
        config: Deployment defaults; built-in defaults when None
        dry_run: Validate and normalize, but never call the sink
        force: Skip the confirmation prompt
        detect_missing_category: Derive a category from the title for records
                                 that carry none
        short_ids: Short id generator for this run (created from config
                   when None)

    Returns:
        BatchResult with counts and the ordered list of errors

    Raises:
        FatalUploadError: If the run cannot start or is cancelled
    """
    config = config or UploaderConfig()
    short_ids = short_ids or ShortIdGenerator(
        digits=config.short_id.digits,
        max_attempts=config.short_id.max_attempts,
    )

    if not file_system.exists(source_dir):
        raise FatalUploadError(f'Directory "{source_dir}" does not exist')

    files = file_system.list_json_files(source_dir)
    if not files:
        raise FatalUploadError(f'No JSON files found in "{source_dir}"')

    logger.info(f"Found {len(files)} JSON files: {', '.join(files)}")

    if not dry_run and sink is None:
        raise FatalUploadError("A publication sink is required unless running a dry run")

    if not force and not dry_run:
        prompter = prompter or ConsolePrompter()
        if not prompter.confirm(f"Do you want to import {len(files)} files? (yes/no): "):
            raise FatalUploadError("Import canceled")

    start_time = datetime.now(timezone.utc)
    result = BatchResult()

    if not dry_run:
        logger.info("Connecting to publications database")
        try:
            sink.open()
        except Exception as e:
            raise FatalUploadError(f"Could not connect to sink: {e}") from e

    try:
        for file_name in files:
            _process_file(
                source_dir=source_dir,
                file_name=file_name,
                file_system=file_system,
                sink=None if dry_run else sink,
                config=config,
                short_ids=short_ids,
                detect_missing_category=detect_missing_category,
                result=result,
            )
    finally:
        if not dry_run:
            sink.close()

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info(
        "Uploader run completed",
        extra={
            'duration_seconds': duration,
            'total': result.total,
            'success': result.success,
            'skipped': result.skipped,
            'errors': len(result.errors),
            'dry_run': dry_run,
        }
    )

    return result


def _process_file(
    source_dir: str,
    file_name: str,
    file_system: FileSystem,
    sink: Optional[PublicationSink],
    config: UploaderConfig,
    short_ids: ShortIdGenerator,
    detect_missing_category: bool,
    result: BatchResult
) -> None:
    logger.info(f"Processing file: {file_name}")

    try:
        content = file_system.read_text(source_dir, file_name)
        parsed = json.loads(content)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.error(f"Error processing file {file_name}: {e}")
        result.add_error(file_name, None, f"File error: {e}")
        return

    records = parsed if isinstance(parsed, list) else [parsed]
    logger.info(f"Found {len(records)} publications in file")
    result.total += len(records)

    for record in records:
        if _process_record(file_name, record, sink, config, short_ids, detect_missing_category, result):
            result.success += 1
        else:
            result.skipped += 1


def _process_record(
    file_name: str,
    record: Any,
    sink: Optional[PublicationSink],
    config: UploaderConfig,
    short_ids: ShortIdGenerator,
    detect_missing_category: bool,
    result: BatchResult
) -> bool:
    """Validate, normalize and write one record. Returns True on success."""
    title = _title_of(record)

    if detect_missing_category and isinstance(record, dict):
        _fill_detected_category(record)

    validation = validate_publication(record, config)
    if not validation.valid:
        logger.warning(
            f'Error validating publication "{title}": {validation.error}',
            extra={'file': file_name}
        )
        result.add_error(file_name, title, validation.error)
        return False

    try:
        publication = normalize_publication(record, short_ids=short_ids, config=config)
        collection = collection_for(publication['category'], config.table_prefix)
    except (NormalizationError, KeyError) as e:
        logger.warning(
            f'Error normalizing publication "{title}": {e}',
            extra={'file': file_name}
        )
        result.add_error(file_name, title, str(e))
        return False

    if sink is None:
        logger.info(
            f'Would import: "{publication["title"]}" (ID: {publication["id"]}) to {collection}'
        )
        return True

    try:
        sink.write(collection, publication)
    except Exception as e:
        logger.error(
            f'Error writing publication "{title}": {e}',
            extra={'file': file_name, 'collection': collection}
        )
        result.add_error(file_name, title, str(e))
        return False

    logger.info(
        f'Imported: "{publication["title"]}" (ID: {publication["id"]}) to {collection}'
    )
    return True


def _title_of(record: Any) -> str:
    title = record.get('title') if isinstance(record, dict) else None
    if not title or not str(title).strip():
        return UNTITLED
    return str(title)


def _fill_detected_category(record: dict[str, Any]) -> None:
    if record.get('category') or record.get('categorySlug'):
        return
    title = record.get('title')
    if not isinstance(title, str) or not title.strip():
        return
    record['category'] = detect_category(title)
    logger.info(f'Detected category "{record["category"]}" for "{title}"')


def format_summary(result: BatchResult, dry_run: bool = False) -> str:
    """Render the human-readable run summary."""
    lines = [
        "=== IMPORT SUMMARY ===",
        f"Total publications: {result.total}",
        f"Successfully processed: {result.success}",
        f"Skipped: {result.skipped}",
        f"Errors: {len(result.errors)}",
    ]

    if result.errors:
        lines.append("")
        lines.append("Error details:")
        for index, error in enumerate(result.errors, start=1):
            lines.append(
                f"  {index}. File: {error.file}, Title: {error.title or 'N/A'}, "
                f"Error: {error.message}"
            )

    if dry_run:
        lines.append("")
        lines.append("This was a dry run. No changes were made to the database.")

    return "\n".join(lines)
