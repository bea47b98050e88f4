"""
Pagination Helper Functions

List endpoints accept either skip/limit (project feeds) or a 1-based
page/limit pair (discussion boards). Both end up in the same envelope.
"""

from typing import Any, Dict, List


def skip_for_page(page: int, limit: int) -> int:
    """Offset of the first item on a 1-based page."""
    return max(page - 1, 0) * limit


def build_pagination_response(
    items: List[Any],
    total: int,
    skip: int,
    limit: int,
) -> Dict[str, Any]:
    """
    Wrap a page of items in the list envelope.

    Returns:
        Dictionary with items, total, page, size and pages
    """
    pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "items": items,
        "total": total,
        "page": (skip // limit) + 1 if limit > 0 else 1,
        "size": limit,
        "pages": pages,
    }
