"""
Database Country Catalog - SQLAlchemy-backed primary source.

============================================================
PURPOSE
============================================================
Reads country reference data from the `countries` table and
replaces it wholesale on import.

Every SQLAlchemy failure while reading surfaces as
CatalogUnavailableError so a fallback catalog can take over.

============================================================
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database.engine import get_db_session, get_session_factory, transaction_scope
from hrdd_engine.types import CountryRiskRecord

from country_catalog.base import CountryCatalog
from country_catalog.exceptions import CatalogUnavailableError, CountryNotFoundError
from country_catalog.models import CountryRow


logger = logging.getLogger(__name__)


class DatabaseCountryCatalog(CountryCatalog):
    """
    Catalog backed by the `countries` table.

    Args:
        session_factory: Session factory to use; the shared
                         factory from database.engine otherwise
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None) -> None:
        self._session_factory = session_factory

    @property
    def name(self) -> str:
        return "database"

    def _factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    def get_all_countries(self) -> List[CountryRiskRecord]:
        try:
            with get_db_session(self._factory()) as session:
                rows = session.execute(select(CountryRow).order_by(CountryRow.name)).scalars().all()
                records = [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise CatalogUnavailableError(
                "Failed to read countries", catalog_name=self.name, original_error=e
            ) from e

        logger.debug(f"Loaded {len(records)} countries from database")
        return records

    def get_country(self, iso_code: str) -> CountryRiskRecord:
        try:
            with get_db_session(self._factory()) as session:
                row = session.execute(
                    select(CountryRow).where(CountryRow.iso_code == iso_code)
                ).scalar_one_or_none()
                record = row.to_record() if row is not None else None
        except SQLAlchemyError as e:
            raise CatalogUnavailableError(
                f"Failed to read country {iso_code}", catalog_name=self.name, original_error=e
            ) from e

        if record is None:
            raise CountryNotFoundError(iso_code, catalog_name=self.name)
        return record

    def count(self) -> int:
        try:
            with get_db_session(self._factory()) as session:
                return session.execute(select(func.count()).select_from(CountryRow)).scalar_one()
        except SQLAlchemyError as e:
            raise CatalogUnavailableError(
                "Failed to count countries", catalog_name=self.name, original_error=e
            ) from e

    def is_available(self) -> bool:
        try:
            with get_db_session(self._factory()) as session:
                session.execute(select(CountryRow.id).limit(1))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Country database unavailable: {e}")
            return False

    def replace_all(self, records: Iterable[CountryRiskRecord]) -> int:
        """
        Replace every row with the given records in one transaction.

        Returns:
            Number of rows written

        Raises:
            DatabasePersistenceError: If the transaction fails
        """
        rows = [CountryRow.from_record(record) for record in records]
        with transaction_scope(self._factory()) as session:
            deleted = session.execute(delete(CountryRow)).rowcount
            session.add_all(rows)

        logger.info(f"Replaced countries table: deleted={deleted} inserted={len(rows)}")
        return len(rows)
