"""
Country Catalog Exceptions - Custom exception hierarchy.
"""

from typing import Any, Optional


class CountryCatalogError(Exception):
    """Base exception for all country catalog errors."""

    def __init__(
        self,
        message: str,
        catalog_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.catalog_name = catalog_name
        self.original_error = original_error
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "catalog_name": self.catalog_name,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.catalog_name:
            parts.append(f"[catalog={self.catalog_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class CatalogUnavailableError(CountryCatalogError):
    """The backing store cannot be reached or read."""
    pass


class CountryNotFoundError(CountryCatalogError):
    """No country with the requested ISO code."""

    def __init__(self, iso_code: str, catalog_name: Optional[str] = None) -> None:
        super().__init__(
            f"Country not found: {iso_code}",
            catalog_name=catalog_name,
            context={"iso_code": iso_code},
        )
        self.iso_code = iso_code


class CountryDataFormatError(CountryCatalogError):
    """A country snapshot file is malformed."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        catalog_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            catalog_name=catalog_name,
            context={"line_number": line_number} if line_number is not None else None,
        )
        self.line_number = line_number
