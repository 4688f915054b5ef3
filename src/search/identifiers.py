"""
Chunk identifier helpers.

Chunks are indexed under ids of the form ``<parent-id>_<chunk-index>``.
Every component that needs the parent/child relation or the position of a
chunk inside its document goes through these functions.
"""

import re

CHUNK_SUFFIX_PATTERN = re.compile(r"_(\d+)$")


def parent_of(chunk_id: str) -> str:
    """
    Strip the trailing ``_N`` suffix from a chunk id.

    Args:
        chunk_id: Chunk identifier (e.g., "doc123_5")

    Returns:
        str: Parent id ("doc123"), or the id unchanged if it has no numeric suffix
    """
    match = CHUNK_SUFFIX_PATTERN.search(chunk_id)
    if match is None:
        return chunk_id
    return chunk_id[: match.start()]


def sort_index_of(chunk_id: str) -> int:
    """
    Parse the chunk index out of a chunk id.

    Returns 0 when the id carries no numeric suffix.
    """
    match = CHUNK_SUFFIX_PATTERN.search(chunk_id)
    if match is None:
        return 0
    return int(match.group(1))


def window_of(chunk_id: str, k: int) -> set[str]:
    """
    Compute the ids of the chunks surrounding ``chunk_id``.

    The window spans ``N-k .. N+k`` (inclusive) around the chunk index ``N``,
    clamped so that no negative index is produced.

    Args:
        chunk_id: Center of the window
        k: Number of neighbours on each side

    Returns:
        set: Chunk ids in the window (includes ``chunk_id`` itself). Empty when
        ``k`` is not positive or the id has no numeric suffix.

    Example:
        >>> sorted(window_of("doc123_0", 2))
        ['doc123_0', 'doc123_1', 'doc123_2']
    """
    if k <= 0:
        return set()

    match = CHUNK_SUFFIX_PATTERN.search(chunk_id)
    if match is None:
        return set()

    prefix = chunk_id[: match.start()]
    base = int(match.group(1))
    return {f"{prefix}_{i}" for i in range(max(0, base - k), base + k + 1)}
