"""
Tests for canonical search filters and their backend translations.
"""

import pytest

from src.search.filters import RangeBound, SearchFilter


def matches_keyword_clauses(document: dict, clauses: list[dict]) -> bool:
    """Evaluate Elasticsearch bool.filter clauses against one document."""
    for clause in clauses:
        if "terms" in clause:
            (field, values), = clause["terms"].items()
            if document.get(field) not in values:
                return False
        elif "range" in clause:
            (field, bounds), = clause["range"].items()
            value = document.get(field)
            if value is None:
                return False
            if "gte" in bounds and value < bounds["gte"]:
                return False
            if "lte" in bounds and value > bounds["lte"]:
                return False
        else:
            raise ValueError(f"Unknown clause: {clause}")
    return True


def matches_vector_where(document: dict, where) -> bool:
    """Evaluate a ChromaDB where document against one document's metadata."""
    if where is None:
        return True
    if "$and" in where:
        return all(matches_vector_where(document, condition) for condition in where["$and"])

    (field, condition), = where.items()
    (operator, operand), = condition.items()
    value = document.get(field)
    if operator == "$in":
        return value in operand
    if value is None:
        return False
    if operator == "$gte":
        return value >= operand
    if operator == "$lte":
        return value <= operand
    raise ValueError(f"Unknown operator: {operator}")


@pytest.fixture
def corpus():
    """Fixture corpus of chunk metadata."""
    return [
        {"id": "a_0", "journal": "A", "publication_date": 0},
        {"id": "a_1", "journal": "A", "publication_date": 1_600_000_000},
        {"id": "b_0", "journal": "B", "publication_date": 1_700_000_000},
        {"id": "c_0", "journal": "C", "publication_date": 1_700_000_000},
        {"id": "d_0", "journal": "B", "publication_date": 1_800_000_000},
    ]


def select_both(corpus: list[dict], search_filter: SearchFilter) -> tuple[set, set]:
    clauses = search_filter.to_keyword_clauses()
    where = search_filter.to_vector_where()
    keyword_ids = {doc["id"] for doc in corpus if matches_keyword_clauses(doc, clauses)}
    vector_ids = {doc["id"] for doc in corpus if matches_vector_where(doc, where)}
    return keyword_ids, vector_ids


class TestSearchFilter:
    """Test suite for SearchFilter."""

    def test_empty_filter(self):
        search_filter = SearchFilter()

        assert search_filter.is_empty()
        assert search_filter.to_keyword_clauses() == []
        assert search_filter.to_vector_where() is None

    def test_empty_range_is_dropped(self):
        search_filter = SearchFilter(ranges={"publication_date": RangeBound()})

        assert search_filter.is_empty()
        assert search_filter.to_vector_where() is None

    def test_empty_term_list_is_dropped(self):
        search_filter = SearchFilter(terms={"journal": []})

        assert search_filter.is_empty()

    def test_keyword_clauses(self):
        search_filter = SearchFilter(
            terms={"journal": ["A", "B"]},
            ranges={"publication_date": RangeBound(gte=100, lte=200)},
        )

        assert search_filter.to_keyword_clauses() == [
            {"terms": {"journal": ["A", "B"]}},
            {"range": {"publication_date": {"gte": 100, "lte": 200}}},
        ]

    def test_keyword_range_only_includes_present_bounds(self):
        search_filter = SearchFilter(ranges={"publication_date": RangeBound(lte=200)})

        assert search_filter.to_keyword_clauses() == [
            {"range": {"publication_date": {"lte": 200}}},
        ]

    def test_vector_single_condition_is_unwrapped(self):
        search_filter = SearchFilter(terms={"journal": ["A", "B"]})

        assert search_filter.to_vector_where() == {"journal": {"$in": ["A", "B"]}}

    def test_vector_multiple_conditions_use_and(self):
        search_filter = SearchFilter(
            terms={"journal": ["A"]},
            ranges={"publication_date": RangeBound(gte=100, lte=200)},
        )

        assert search_filter.to_vector_where() == {
            "$and": [
                {"journal": {"$in": ["A"]}},
                {"publication_date": {"$gte": 100}},
                {"publication_date": {"$lte": 200}},
            ]
        }

    def test_zero_bound_is_honoured(self):
        search_filter = SearchFilter(ranges={"publication_date": RangeBound(gte=0, lte=0)})

        assert search_filter.to_keyword_clauses() == [
            {"range": {"publication_date": {"gte": 0, "lte": 0}}},
        ]
        assert search_filter.to_vector_where() == {
            "$and": [
                {"publication_date": {"$gte": 0}},
                {"publication_date": {"$lte": 0}},
            ]
        }

    def test_from_request(self):
        search_filter = SearchFilter.from_request(
            {"journal": ["A"]},
            {"publication_date": {"gte": 10, "lte": None}},
        )

        assert search_filter.terms == {"journal": ["A"]}
        assert search_filter.ranges == {"publication_date": RangeBound(gte=10)}

    def test_from_request_without_filters(self):
        assert SearchFilter.from_request(None, None).is_empty()

    def test_to_dict(self):
        search_filter = SearchFilter(
            terms={"journal": ["A"]},
            ranges={"publication_date": RangeBound(gte=1)},
        )

        assert search_filter.to_dict() == {
            "terms": {"journal": ["A"]},
            "ranges": {"publication_date": {"gte": 1, "lte": None}},
        }


class TestFilterEquivalence:
    """Both translations must select the same documents."""

    def test_terms_select_same_documents(self, corpus):
        keyword_ids, vector_ids = select_both(corpus, SearchFilter(terms={"journal": ["A", "B"]}))

        assert keyword_ids == vector_ids == {"a_0", "a_1", "b_0", "d_0"}

    def test_terms_and_range_select_same_documents(self, corpus):
        search_filter = SearchFilter(
            terms={"journal": ["A", "B"]},
            ranges={"publication_date": RangeBound(gte=1_600_000_000, lte=1_700_000_000)},
        )

        keyword_ids, vector_ids = select_both(corpus, search_filter)

        assert keyword_ids == vector_ids == {"a_1", "b_0"}

    def test_zero_upper_bound_selects_same_documents(self, corpus):
        search_filter = SearchFilter(ranges={"publication_date": RangeBound(lte=0)})

        keyword_ids, vector_ids = select_both(corpus, search_filter)

        assert keyword_ids == vector_ids == {"a_0"}

    def test_zero_lower_bound_selects_same_documents(self, corpus):
        search_filter = SearchFilter(
            terms={"journal": ["A"]},
            ranges={"publication_date": RangeBound(gte=0)},
        )

        keyword_ids, vector_ids = select_both(corpus, search_filter)

        assert keyword_ids == vector_ids == {"a_0", "a_1"}

    def test_empty_filter_selects_everything(self, corpus):
        keyword_ids, vector_ids = select_both(corpus, SearchFilter())

        assert keyword_ids == vector_ids == {doc["id"] for doc in corpus}
