"""
Canonical search filters and their translation into backend query syntax.

A single SearchFilter holds:
- term constraints: field must equal one of a set of values
- range constraints: numeric field within optional lower/upper bounds

It is translated into:
- Elasticsearch ``bool.filter`` clauses for the keyword store
- a ChromaDB ``where`` document for the vector store

Both translations select the same documents.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RangeBound:
    """
    Inclusive numeric bounds on one field.

    None means unbounded on that side. Zero is a real bound.
    """

    gte: Optional[float] = None
    lte: Optional[float] = None

    def is_empty(self) -> bool:
        return self.gte is None and self.lte is None


class SearchFilter:
    """
    Backend-agnostic filter over chunk metadata.

    Attributes:
        terms: Field name -> allowed values
        ranges: Field name -> RangeBound
    """

    def __init__(
        self,
        terms: Optional[Mapping[str, Sequence[str]]] = None,
        ranges: Optional[Mapping[str, RangeBound]] = None,
    ) -> None:
        """
        Initialize search filter.

        Args:
            terms: Term constraints (e.g., {"journal": ["A", "B"]})
            ranges: Range constraints (e.g., {"publication_date": RangeBound(gte=0)})
        """
        # A field with no allowed values places no constraint
        self.terms = {
            field: list(values) for field, values in (terms or {}).items() if values
        }
        self.ranges = {
            field: bound for field, bound in (ranges or {}).items() if not bound.is_empty()
        }

        logger.debug(f"SearchFilter created: terms={self.terms}, ranges={self.ranges}")

    @classmethod
    def from_request(
        cls,
        terms: Optional[Mapping[str, Sequence[str]]] = None,
        ranges: Optional[Mapping[str, Mapping[str, Optional[float]]]] = None,
    ) -> "SearchFilter":
        """
        Build a filter from the request's ``filter`` and ``datefilter`` objects.

        Args:
            terms: {field: [values]}
            ranges: {field: {"gte": x, "lte": y}}

        Returns:
            SearchFilter
        """
        bounds = {
            field: RangeBound(gte=limits.get("gte"), lte=limits.get("lte"))
            for field, limits in (ranges or {}).items()
        }
        return cls(terms=terms, ranges=bounds)

    def is_empty(self) -> bool:
        """
        Check if filter has any active conditions.

        Returns:
            bool: True if no filters are set
        """
        return not self.terms and not self.ranges

    def to_keyword_clauses(self) -> list[dict[str, Any]]:
        """
        Translate into Elasticsearch ``bool.filter`` clauses.

        Returns:
            list: One ``terms`` clause per term field and one ``range`` clause
            per range field. Empty when the filter is empty.
        """
        clauses: list[dict[str, Any]] = []

        for field, values in self.terms.items():
            clauses.append({"terms": {field: values}})

        for field, bound in self.ranges.items():
            range_spec: dict[str, float] = {}
            if bound.gte is not None:
                range_spec["gte"] = bound.gte
            if bound.lte is not None:
                range_spec["lte"] = bound.lte
            clauses.append({"range": {field: range_spec}})

        return clauses

    def to_vector_where(self) -> Optional[dict[str, Any]]:
        """
        Translate into a ChromaDB ``where`` document.

        Chroma allows a single operator per field condition and needs at
        least two operands under ``$and``, so each bound is its own condition
        and a lone condition is returned unwrapped.

        Returns:
            dict or None: None when the filter is empty, so the caller can
            leave the ``where`` argument out of the query entirely
        """
        conditions: list[dict[str, Any]] = []

        for field, values in self.terms.items():
            conditions.append({field: {"$in": values}})

        for field, bound in self.ranges.items():
            if bound.gte is not None:
                conditions.append({field: {"$gte": bound.gte}})
            if bound.lte is not None:
                conditions.append({field: {"$lte": bound.lte}})

        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert filter to dictionary representation.

        Returns:
            dict: Filter configuration
        """
        return {
            "terms": self.terms,
            "ranges": {
                field: {"gte": bound.gte, "lte": bound.lte}
                for field, bound in self.ranges.items()
            },
        }
