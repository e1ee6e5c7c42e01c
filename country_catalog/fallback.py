"""
Fallback Country Catalog - Two-tier data source.

============================================================
PURPOSE
============================================================
Serves country data from a primary catalog (the datastore)
and falls back to a secondary catalog (the static snapshot)
when the primary is unavailable or still empty.

FALLBACK TRIGGERS:
- CatalogUnavailableError from the primary
- Any SQLAlchemy error escaping the primary
- An empty country list from the primary

CountryNotFoundError falls back only while the primary holds
no rows; an unknown ISO code in a populated primary is a
real miss.

============================================================
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hrdd_engine.types import CountryRiskRecord

from country_catalog.base import CountryCatalog
from country_catalog.database import DatabaseCountryCatalog
from country_catalog.exceptions import CatalogUnavailableError, CountryNotFoundError
from country_catalog.file_loader import FileCountryCatalog


logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackCountryCatalog(CountryCatalog):
    """Primary catalog with a fallback for outages."""

    def __init__(self, primary: CountryCatalog, fallback: CountryCatalog) -> None:
        self._primary = primary
        self._fallback = fallback
        self._last_source: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self._primary.name}+{self._fallback.name}"

    @property
    def last_source(self) -> Optional[str]:
        """Name of the catalog that served the most recent call."""
        return self._last_source

    def _with_fallback(self, operation: str, call: Callable[[CountryCatalog], T]) -> T:
        try:
            result = call(self._primary)
        except (CatalogUnavailableError, SQLAlchemyError) as e:
            logger.warning(
                f"Catalog '{self._primary.name}' failed during {operation}, "
                f"using '{self._fallback.name}': {e}"
            )
        else:
            self._last_source = self._primary.name
            return result

        result = call(self._fallback)
        self._last_source = self._fallback.name
        return result

    def get_all_countries(self) -> List[CountryRiskRecord]:
        countries = self._with_fallback("get_all_countries", lambda c: c.get_all_countries())
        if countries or self._last_source == self._fallback.name:
            return countries

        logger.warning(
            f"Catalog '{self._primary.name}' returned no countries, "
            f"using '{self._fallback.name}'"
        )
        self._last_source = self._fallback.name
        return self._fallback.get_all_countries()

    def get_country(self, iso_code: str) -> CountryRiskRecord:
        try:
            record = self._primary.get_country(iso_code)
        except (CatalogUnavailableError, SQLAlchemyError) as e:
            logger.warning(
                f"Catalog '{self._primary.name}' failed during get_country, "
                f"using '{self._fallback.name}': {e}"
            )
        except CountryNotFoundError:
            if not self._primary_is_empty():
                self._last_source = self._primary.name
                raise
            logger.warning(
                f"Catalog '{self._primary.name}' holds no countries, "
                f"looking up {iso_code} in '{self._fallback.name}'"
            )
        else:
            self._last_source = self._primary.name
            return record

        self._last_source = self._fallback.name
        return self._fallback.get_country(iso_code)

    def _primary_is_empty(self) -> bool:
        try:
            return not self._primary.get_all_countries()
        except (CatalogUnavailableError, SQLAlchemyError):
            return True

    def is_available(self) -> bool:
        return self._primary.is_available() or self._fallback.is_available()


def create_country_catalog(
    session_factory: Optional[sessionmaker] = None,
    file_path: Optional[Union[str, Path]] = None,
    use_database: bool = True,
) -> CountryCatalog:
    """
    Build the standard catalog.

    Args:
        session_factory: Session factory for the datastore
        file_path: Snapshot file for the fallback
        use_database: False gives the snapshot catalog alone

    Returns:
        FallbackCountryCatalog(database, file), or FileCountryCatalog
    """
    file_catalog = FileCountryCatalog(file_path)
    if not use_database:
        return file_catalog
    return FallbackCountryCatalog(DatabaseCountryCatalog(session_factory), file_catalog)
