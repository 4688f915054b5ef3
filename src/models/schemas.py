"""
Pydantic schemas for API requests and responses.

This module defines the data models used for API communication,
validation, and serialization.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RangeFilter(BaseModel):
    """Inclusive numeric bounds on one field. Omitted bounds are open."""

    gte: Optional[float] = Field(None, description="Lower bound (inclusive)")
    lte: Optional[float] = Field(None, description="Upper bound (inclusive)")


class SearchRequest(BaseModel):
    """Schema for search requests."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., description="Search question", min_length=1, max_length=1000)
    filter: Optional[Dict[str, List[str]]] = Field(
        None, description="Term filters, e.g. {'journal': ['JOURNAL OF INDUSTRIAL ECOLOGY']}"
    )
    datefilter: Optional[Dict[str, RangeFilter]] = Field(
        None, description="Range filters, e.g. {'publication_date': {'gte': 1600000000}}"
    )
    top_k: int = Field(
        default=5, alias="topK", description="Results requested from each backend", ge=1, le=100
    )
    ext_k: int = Field(
        default=0,
        alias="extK",
        description="Neighbouring chunks fetched on each side of every match",
        ge=0,
        le=10,
    )

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate and clean the query string."""
        v = v.strip()
        if not v:
            raise ValueError("Query cannot be empty or only whitespace")
        return v

    def range_filters(self) -> Dict[str, Dict[str, Optional[float]]]:
        """Range filters as plain dictionaries."""
        return {field: bound.model_dump() for field, bound in (self.datefilter or {}).items()}


class SearchResultItem(BaseModel):
    """Schema for a single merged passage."""

    content: str = Field(..., description="Merged passage text")
    source: str = Field(..., description="Formatted citation")


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str = Field(..., description="Error message")

