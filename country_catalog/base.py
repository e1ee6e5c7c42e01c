"""
Base Country Catalog - Abstract interface for country reference data.

All catalogs MUST:
- Return immutable CountryRiskRecord objects
- Raise CountryNotFoundError for unknown ISO codes
- Raise CatalogUnavailableError when the backing store fails
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from hrdd_engine.types import CountryRiskRecord

from country_catalog.exceptions import CountryNotFoundError


logger = logging.getLogger(__name__)


class CountryCatalog(ABC):
    """
    Abstract base class for country data sources.

    Each catalog must:
    1. Implement name - Unique identifier for logs and errors
    2. Implement get_all_countries() - Full reference set
    3. Implement is_available() - Cheap readiness probe

    get_country() and get_countries_by_iso() are derived from
    get_all_countries(); subclasses may override for efficiency.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this catalog."""
        pass

    @abstractmethod
    def get_all_countries(self) -> List[CountryRiskRecord]:
        """
        Return every country in the catalog.

        Raises:
            CatalogUnavailableError: If the backing store fails
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """True when the backing store can currently be read."""
        pass

    def get_country(self, iso_code: str) -> CountryRiskRecord:
        """
        Look up one country by ISO code.

        Raises:
            CountryNotFoundError: If the ISO code is unknown
            CatalogUnavailableError: If the backing store fails
        """
        for record in self.get_all_countries():
            if record.iso_code == iso_code:
                return record
        raise CountryNotFoundError(iso_code, catalog_name=self.name)

    def get_countries_by_iso(self) -> Dict[str, CountryRiskRecord]:
        """All countries keyed by ISO code."""
        return {record.iso_code: record for record in self.get_all_countries()}
