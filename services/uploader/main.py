"""
Uploader Service - Main Entry Point

This is the command-line interface for the uploader service.

Usage:
    python -m services.uploader.main SOURCE_DIR [OPTIONS]

Options:
    --dry-run            Validate and normalize without writing to database
    --force              Skip the confirmation prompt
    --config TEXT        Path to uploader.yml configuration file
    --detect-category    Derive a category from the title when none is given
    --verbose            Enable debug logging
    --help               Show this message and exit

Examples:
    # Import every JSON file of a directory (asks for confirmation):
    python -m services.uploader.main data/publications

    # See what would be imported:
    python -m services.uploader.main data/publications --dry-run

    # Unattended import:
    python -m services.uploader.main data/publications --force

Exit Codes:
    0: Run completed (individual records may still have failed)
    2: Fatal error (missing directory, no JSON files, database connection,
       cancelled confirmation, invalid configuration, usage error)
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .base import ConsolePrompter, LocalFileSystem
from .categories import VALID_CATEGORIES, collection_for
from .config_loader import load_uploader_config
from .db_operations import DatabaseError, PostgresPublicationSink
from .orchestrator import FatalUploadError, format_summary, run_uploader

# Load environment variables (.env.local overrides .env)
load_dotenv()
load_dotenv(Path.cwd() / '.env.local', override=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Import publication JSON files into the publications database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        'source_dir',
        type=str,
        help='Directory containing the JSON files to import'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Simulate import without making actual changes',
        dest='dry_run'
    )

    parser.add_argument(
        '--force',
        action='store_true',
        help='Skip confirmation prompts'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to uploader.yml configuration file (default: config/uploader.yml)'
    )

    parser.add_argument(
        '--detect-category',
        action='store_true',
        help='Derive a category from the title for records without one',
        dest='detect_category'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def _mask_url(url: str) -> str:
    return f"{url[:15]}..." if url else '(not set)'


def main(argv=None) -> int:
    """
    Main entry point for the uploader service.

    Returns:
        Exit code (0 = run completed, 2 = fatal error)
    """
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    database_url = os.getenv('DATABASE_URL', '')

    logger.info("=== PUBLICATION UPLOADER TOOL ===")
    logger.info(f"Source directory: {args.source_dir}")
    logger.info(f"Database URL: {_mask_url(database_url)}")
    logger.info(f"Mode: {'Dry run (no changes)' if args.dry_run else 'Import'}")

    try:
        config = load_uploader_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    sink = None
    if not args.dry_run:
        if not database_url:
            logger.error("DATABASE_URL environment variable must be set")
            return 2
        sink = PostgresPublicationSink(
            database_url,
            collections=[
                collection_for(category, config.table_prefix)
                for category in VALID_CATEGORIES
            ],
        )

    try:
        result = run_uploader(
            source_dir=args.source_dir,
            file_system=LocalFileSystem(),
            sink=sink,
            prompter=ConsolePrompter(),
            config=config,
            dry_run=args.dry_run,
            force=args.force,
            detect_missing_category=args.detect_category,
        )

    except FatalUploadError as e:
        logger.error(f"Fatal error: {e}")
        return 2

    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2

    print()
    print(format_summary(result, dry_run=args.dry_run))
    logger.debug("Run result", extra={'result': result.to_dict()})

    if result.errors:
        logger.warning(f"Completed with {len(result.errors)} errors")
    else:
        logger.info("Uploader completed successfully")
    return 0


if __name__ == '__main__':
    sys.exit(main())
