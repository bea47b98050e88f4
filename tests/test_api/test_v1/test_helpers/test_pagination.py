"""Tests for the list envelope shared by projects and discussions."""

import pytest

from app.api.v1.helpers.pagination import build_pagination_response, skip_for_page


@pytest.mark.parametrize(
    "total, skip, limit, page, pages",
    [
        (25, 0, 10, 1, 3),
        (25, 10, 10, 2, 3),
        (25, 20, 10, 3, 3),
        (20, 0, 10, 1, 2),
        (5, 0, 10, 1, 1),
        (0, 0, 10, 1, 0),
        (10, 0, 0, 1, 0),
    ],
)
def test_envelope_page_numbers(total, skip, limit, page, pages):
    result = build_pagination_response([], total=total, skip=skip, limit=limit)

    assert (result["page"], result["pages"]) == (page, pages)
    assert result["total"] == total
    assert result["size"] == limit


def test_items_passed_through():
    items = [{"id": "project-1"}, {"id": "project-2"}]
    assert build_pagination_response(items, total=2, skip=0, limit=20)["items"] == items


@pytest.mark.parametrize("page, expected", [(1, 0), (3, 40), (0, 0), (-2, 0)])
def test_skip_for_page(page, expected):
    assert skip_for_page(page, 20) == expected


def test_discussion_page_maps_back_to_same_page():
    result = build_pagination_response([], total=45, skip=skip_for_page(3, 20), limit=20)
    assert (result["page"], result["pages"]) == (3, 3)
