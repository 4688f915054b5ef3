"""
Hybrid search merging of semantic and keyword hits.

This module turns the hit lists of the two retrieval backends into one
ordered list of passages:

1. Union/dedup - similarity hits and keyword hits merged by chunk id,
   similarity copies winning on conflict
2. Context expansion - ids of neighbouring chunks that were not retrieved
3. Grouping - chunks of the same parent document merged into one passage,
   in chunk order
"""

import logging
from typing import Iterable

from src.search.documents import Hit, Passage
from src.search.identifiers import window_of

logger = logging.getLogger(__name__)


def union_hits(
    similarity_hits: Iterable[Hit],
    keyword_hits: Iterable[Hit],
) -> list[Hit]:
    """
    Merge both backends' hits so that every chunk id appears once.

    All similarity hits are kept. A keyword hit is kept only if its chunk id
    was not already returned, so for a chunk found by both backends the
    similarity metadata wins.

    Args:
        similarity_hits: Hits from the vector store, in backend order
        keyword_hits: Hits from the keyword store, in backend order

    Returns:
        list: Deduplicated hits
    """
    seen_ids: set[str] = set()
    merged: list[Hit] = []
    similarity_count = 0
    keyword_count = 0

    for hit in similarity_hits:
        similarity_count += 1
        if hit.chunk_id in seen_ids:
            continue
        seen_ids.add(hit.chunk_id)
        merged.append(hit)

    for hit in keyword_hits:
        keyword_count += 1
        if hit.chunk_id in seen_ids:
            continue
        seen_ids.add(hit.chunk_id)
        merged.append(hit)

    logger.info(
        f"Union: {similarity_count} semantic + {keyword_count} keyword "
        f"-> {len(merged)} unique chunks"
    )

    return merged


def expansion_candidates(seen_ids: Iterable[str], ext_k: int) -> set[str]:
    """
    Compute the neighbouring chunk ids worth fetching.

    Args:
        seen_ids: Chunk ids already retrieved
        ext_k: Number of neighbours on each side of every retrieved chunk

    Returns:
        set: Ids inside some window that were not already retrieved
    """
    seen = set(seen_ids)
    candidates: set[str] = set()

    for chunk_id in seen:
        candidates |= window_of(chunk_id, ext_k)

    candidates -= seen

    logger.debug(f"Expansion: {len(seen)} chunks, ext_k={ext_k} -> {len(candidates)} candidates")

    return candidates


def group_passages(hits: Iterable[Hit]) -> list[Passage]:
    """
    Merge the chunks of each parent document into one passage.

    Hits are sorted by (parent id, chunk index). Consecutive hits with the
    same parent are joined with newlines; every other passage field is taken
    from the first chunk of the group.

    Args:
        hits: Deduplicated (and possibly expanded) hits

    Returns:
        list: One passage per parent id, ordered by parent id
    """
    ordered = sorted(hits, key=lambda hit: (hit.parent_id, hit.sort_index))

    passages: list[Passage] = []
    group: list[Hit] = []

    for hit in ordered:
        if group and hit.parent_id != group[0].parent_id:
            passages.append(_reduce_group(group))
            group = []
        group.append(hit)

    if group:
        passages.append(_reduce_group(group))

    logger.info(f"Grouping: {len(ordered)} chunks -> {len(passages)} passages")

    return passages


def _reduce_group(group: list[Hit]) -> Passage:
    first = group[0]
    return Passage(
        parent_id=first.parent_id,
        text="\n".join(hit.text for hit in group),
        title=first.title,
        author=first.author,
        identifier_code=first.identifier_code,
        publication_date=first.publication_date,
        page_number=first.page_number,
        journal=first.journal,
    )
