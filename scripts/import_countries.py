"""
Scripts - Import Country Snapshot.

============================================================
RESPONSIBILITY
============================================================
Loads the country snapshot file into the `countries` table.

1. Parses and validates the snapshot
2. Creates the table if needed
3. Replaces all rows in one transaction
4. Reports duplicate ISO codes (last occurrence kept)

EXIT CODES:
- 0: Import complete
- 1: Snapshot missing or malformed
- 2: Database connection or table creation failed
- 3: Import transaction failed

============================================================
USAGE
============================================================
python -m scripts.import_countries
python -m scripts.import_countries --file data/countries.txt
python -m scripts.import_countries --database-url sqlite:///hrdd.db --dry-run

============================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from country_catalog import (
    CountryCatalogError,
    DatabaseCountryCatalog,
    get_default_country_file,
    load_countries_from_file,
)
from database import (
    DatabaseConnectionError,
    DatabaseInitializationError,
    DatabasePersistenceError,
    create_all_tables,
    create_database_engine,
    get_session_factory,
    verify_database_connection,
)


logger = logging.getLogger("import_countries")

EXIT_OK = 0
EXIT_BAD_SNAPSHOT = 1
EXIT_DATABASE_UNAVAILABLE = 2
EXIT_IMPORT_FAILED = 3


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="import-countries",
        description="Load the country snapshot into the HRDD datastore",
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        default=None,
        help="Snapshot file (default: HRDD_COUNTRY_FILE or bundled data/countries.txt)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: HRDD_DATABASE_URL / DATABASE_URL)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and validate the snapshot without writing",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def run_import(
    file_path: Optional[str] = None,
    database_url: Optional[str] = None,
    dry_run: bool = False,
) -> int:
    """
    Run the import and return an exit code.

    Args:
        file_path: Snapshot file
        database_url: Target database
        dry_run: Validate only

    Returns:
        Process exit code
    """
    path = file_path or get_default_country_file()

    try:
        result = load_countries_from_file(path)
    except CountryCatalogError as e:
        logger.error(f"Cannot load snapshot: {e}")
        return EXIT_BAD_SNAPSHOT

    if result.has_duplicates:
        for duplicate in result.duplicates:
            logger.warning(
                f"Duplicate ISO code {duplicate.iso_code}: "
                f"'{duplicate.replaced}' replaced with '{duplicate.replaced_with}'"
            )

    if dry_run:
        logger.info(f"Dry run: {len(result.countries)} countries validated, nothing written")
        return EXIT_OK

    try:
        engine = create_database_engine(database_url)
        verify_database_connection(engine)
        create_all_tables(engine)
    except (DatabaseConnectionError, DatabaseInitializationError) as e:
        logger.error(f"Database not ready: {e}")
        return EXIT_DATABASE_UNAVAILABLE

    catalog = DatabaseCountryCatalog(get_session_factory(engine))
    try:
        imported = catalog.replace_all(result.countries)
    except DatabasePersistenceError as e:
        logger.error(f"Import failed: {e}")
        return EXIT_IMPORT_FAILED
    finally:
        engine.dispose()

    logger.info(f"Imported {imported} countries")
    if result.has_duplicates:
        count = len(result.duplicates)
        logger.info(
            f"Skipped {count} duplicate entr{'y' if count == 1 else 'ies'} based on ISO codes"
        )
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Import entry point."""
    args = create_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    return run_import(args.file, args.database_url, args.dry_run)


if __name__ == "__main__":
    sys.exit(main())
