"""
Country Catalog - Package.

============================================================
PURPOSE
============================================================
Reference data for the HRDD Risk Engine: the five country
indicators and the precomputed base risk score per ISO code.

============================================================
SOURCES
============================================================
1. DATABASE: `countries` table via SQLAlchemy (primary)
2. FILE: comma-separated snapshot (fallback, import source)

============================================================
USAGE
============================================================
    from country_catalog import create_country_catalog
    from hrdd_engine import HRDDRiskEngine

    catalog = create_country_catalog()
    engine = HRDDRiskEngine()

    records = catalog.get_all_countries()
    risks = engine.calculate_country_risks(records)

============================================================
"""

from .exceptions import (
    CountryCatalogError,
    CatalogUnavailableError,
    CountryNotFoundError,
    CountryDataFormatError,
)
from .base import CountryCatalog
from .file_loader import (
    DEFAULT_COUNTRY_FILE,
    EXPECTED_COLUMN_COUNT,
    CountryDuplicate,
    CountryFileLoadResult,
    FileCountryCatalog,
    get_default_country_file,
    load_countries_from_file,
)
from .models import CountryRow
from .database import DatabaseCountryCatalog
from .fallback import FallbackCountryCatalog, create_country_catalog


__all__ = [
    # Exceptions
    "CountryCatalogError",
    "CatalogUnavailableError",
    "CountryNotFoundError",
    "CountryDataFormatError",

    # Interface
    "CountryCatalog",

    # File snapshot
    "DEFAULT_COUNTRY_FILE",
    "EXPECTED_COLUMN_COUNT",
    "CountryDuplicate",
    "CountryFileLoadResult",
    "FileCountryCatalog",
    "get_default_country_file",
    "load_countries_from_file",

    # Database
    "CountryRow",
    "DatabaseCountryCatalog",

    # Composition
    "FallbackCountryCatalog",
    "create_country_catalog",
]
