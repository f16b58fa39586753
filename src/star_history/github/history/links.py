"""Pagination header parsing."""

import re

# Greedy on purpose: the last page= before "last" belongs to rel="last"
_LAST_PAGE = re.compile(r"next.*[?&]page=(\d+).*last")


def parse_last_page(link_header: str | None) -> int:
    """Return the last page number referenced by a Link header.

    Example:
        >>> parse_last_page('<https://x/?per_page=100&page=2>; rel="next", '
        ...                 '<https://x/?per_page=100&page=42>; rel="last"')
        42

    Malformed, empty or single-page headers yield 1.
    """
    if not link_header:
        return 1
    match = _LAST_PAGE.search(link_header)
    if match is None:
        return 1
    page = int(match.group(1))
    return page if page >= 1 else 1
