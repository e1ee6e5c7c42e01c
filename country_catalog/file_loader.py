"""
File Country Catalog - Static snapshot loader.

============================================================
FILE FORMAT
============================================================
Comma-separated text, one header line then one country per
line, exactly eight columns:

    name, isoCode, itucRightsRating, corruptionIndex,
    migrantWorkerPrevalence, wjpIndex, walkfreeSlaveryIndex,
    baseRiskScore

- NUL characters are removed and wrapping quotes stripped
- Blank lines are skipped
- Non-numeric indicator values become 0
- Duplicate ISO codes: the last occurrence wins and the
  replacement is reported

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from hrdd_engine.types import CountryRiskRecord, RiskFactor

from country_catalog.base import CountryCatalog
from country_catalog.exceptions import CatalogUnavailableError, CountryDataFormatError


logger = logging.getLogger(__name__)

EXPECTED_COLUMN_COUNT = 8

DEFAULT_COUNTRY_FILE = Path(__file__).resolve().parent.parent / "data" / "countries.txt"

COLUMNS = ["name", "isoCode"] + [factor.value for factor in RiskFactor.ordered()] + ["baseRiskScore"]


@dataclass(frozen=True)
class CountryDuplicate:
    """An ISO code that appeared more than once in a snapshot."""

    iso_code: str
    replaced: str
    replaced_with: str

    def to_dict(self) -> Dict[str, str]:
        return {"iso_code": self.iso_code, "replaced": self.replaced, "with": self.replaced_with}


@dataclass(frozen=True)
class CountryFileLoadResult:
    countries: List[CountryRiskRecord] = field(default_factory=list)
    duplicates: List[CountryDuplicate] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicates)


def get_default_country_file() -> Path:
    """Snapshot path from HRDD_COUNTRY_FILE, else the bundled file."""
    override = os.getenv("HRDD_COUNTRY_FILE")
    return Path(override) if override else DEFAULT_COUNTRY_FILE


def _clean(value: str) -> str:
    value = value.replace("\x00", "")
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _to_number(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def load_countries_from_file(path: Optional[Union[str, Path]] = None) -> CountryFileLoadResult:
    """
    Parse a country snapshot file.

    Args:
        path: Snapshot path; defaults to get_default_country_file()

    Returns:
        CountryFileLoadResult with countries in first-seen order

    Raises:
        CatalogUnavailableError: File missing or unreadable
        CountryDataFormatError: Empty file, wrong column count or
                                missing ISO code
    """
    file_path = Path(path) if path is not None else get_default_country_file()
    if not file_path.exists():
        raise CatalogUnavailableError(f"Country data file not found at {file_path}", catalog_name="file")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogUnavailableError(
            f"Cannot read country data file {file_path}", catalog_name="file", original_error=e
        ) from e

    lines = [
        (number, line.strip())
        for number, line in enumerate(content.splitlines(), start=1)
        if line.strip()
    ]
    if not lines:
        raise CountryDataFormatError("Country data file is empty", catalog_name="file")

    header_number, header_line = lines[0]
    headers = _clean(header_line).split(",")
    if len(headers) != EXPECTED_COLUMN_COUNT:
        raise CountryDataFormatError(
            f"Unexpected number of columns in header. Expected {EXPECTED_COLUMN_COUNT}, "
            f"received {len(headers)}",
            line_number=header_number,
            catalog_name="file",
        )

    countries: Dict[str, CountryRiskRecord] = {}
    duplicates: List[CountryDuplicate] = []

    for line_number, raw_line in lines[1:]:
        line = _clean(raw_line).strip()
        if not line:
            continue

        values = [_clean(value).strip() for value in line.split(",")]
        if len(values) != EXPECTED_COLUMN_COUNT:
            raise CountryDataFormatError(
                f"Unexpected number of columns on line {line_number}. "
                f"Expected {EXPECTED_COLUMN_COUNT}, received {len(values)}",
                line_number=line_number,
                catalog_name="file",
            )

        name, iso_code = values[0], values[1]
        if not iso_code:
            raise CountryDataFormatError(
                f"Missing ISO code on line {line_number}",
                line_number=line_number,
                catalog_name="file",
            )

        if iso_code in countries:
            duplicates.append(
                CountryDuplicate(
                    iso_code=iso_code,
                    replaced=countries[iso_code].name,
                    replaced_with=name,
                )
            )

        numbers = [_to_number(value) for value in values[2:]]
        countries[iso_code] = CountryRiskRecord.from_mapping(
            dict(zip(COLUMNS, [name, iso_code] + numbers))
        )

    if duplicates:
        logger.warning(
            f"Duplicate ISO codes in {file_path.name}, keeping last occurrence: "
            f"{[duplicate.iso_code for duplicate in duplicates]}"
        )

    logger.info(f"Loaded {len(countries)} countries from {file_path}")
    return CountryFileLoadResult(countries=list(countries.values()), duplicates=duplicates)


class FileCountryCatalog(CountryCatalog):
    """
    Catalog backed by a snapshot file.

    The file is parsed on first use and cached; reload() forces
    a fresh read.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path is not None else get_default_country_file()
        self._result: Optional[CountryFileLoadResult] = None

    @property
    def name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> CountryFileLoadResult:
        if self._result is None:
            self._result = load_countries_from_file(self._path)
        return self._result

    def reload(self) -> CountryFileLoadResult:
        self._result = None
        return self._load()

    @property
    def duplicates(self) -> List[CountryDuplicate]:
        return list(self._load().duplicates)

    def get_all_countries(self) -> List[CountryRiskRecord]:
        return list(self._load().countries)

    def is_available(self) -> bool:
        return self._path.is_file()
