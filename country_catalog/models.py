"""
Country Catalog ORM Models.

============================================================
TABLE
============================================================
countries: one row per country, keyed by ISO code.
Indicator columns mirror CountryRiskRecord.
============================================================
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String

from database.engine import Base
from hrdd_engine.types import CountryRiskRecord


def utc_now():
    """Get current UTC timestamp."""
    return datetime.utcnow()


class CountryRow(Base):
    """
    Reference indicators for one country.

    Source: scripts.import_countries
    Update Frequency: On snapshot import (full replace)
    """
    __tablename__ = "countries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    iso_code = Column(String(8), nullable=False, unique=True, index=True)

    # Indicators (0 means no data)
    ituc_rights_rating = Column(Float, nullable=False, default=0.0)
    corruption_index = Column(Float, nullable=False, default=0.0)
    migrant_worker_prevalence = Column(Float, nullable=False, default=0.0)
    wjp_index = Column(Float, nullable=False, default=0.0)
    walkfree_slavery_index = Column(Float, nullable=False, default=0.0)
    base_risk_score = Column(Float, nullable=False, default=0.0)

    imported_at = Column(DateTime, nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<CountryRow {self.iso_code} {self.name!r}>"

    def to_record(self) -> CountryRiskRecord:
        return CountryRiskRecord(
            iso_code=self.iso_code,
            name=self.name,
            ituc_rights_rating=self.ituc_rights_rating or 0.0,
            corruption_index=self.corruption_index or 0.0,
            migrant_worker_prevalence=self.migrant_worker_prevalence or 0.0,
            wjp_index=self.wjp_index or 0.0,
            walkfree_slavery_index=self.walkfree_slavery_index or 0.0,
            base_risk_score=self.base_risk_score or 0.0,
        )

    @classmethod
    def from_record(cls, record: CountryRiskRecord) -> "CountryRow":
        return cls(
            iso_code=record.iso_code,
            name=record.name,
            ituc_rights_rating=record.ituc_rights_rating,
            corruption_index=record.corruption_index,
            migrant_worker_prevalence=record.migrant_worker_prevalence,
            wjp_index=record.wjp_index,
            walkfree_slavery_index=record.walkfree_slavery_index,
            base_risk_score=record.base_risk_score,
        )
