"""Key normalization for backend-safe record identifiers"""

# Characters the backend refuses inside an id
_FORBIDDEN = ("/", "\\", "?", "#")


def normalize_key(raw_key: str) -> str:
    """
    Map a user supplied key to the identifier stored in the backend

    Trims surrounding whitespace, turns spaces into ``-``, replaces
    ``/ \\ ? #`` with ``_`` and upper-cases the result. Two keys that differ
    only in those characters or in case map to the same record.

    Args:
        raw_key: Key as written by the caller

    Returns:
        Normalized identifier (empty input stays empty)
    """
    key = raw_key.strip().replace(" ", "-")
    for char in _FORBIDDEN:
        key = key.replace(char, "_")
    return key.upper()
