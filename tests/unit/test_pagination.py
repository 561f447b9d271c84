import pytest

from pagination import PageRequest, page_meta

pytestmark = pytest.mark.unit


def test_defaults():
    page = PageRequest.from_query()
    assert (page.page, page.limit, page.skip) == (1, 10, 0)


@pytest.mark.parametrize("page,limit", [(0, 0), (-3, -1)])
def test_values_below_one_are_clamped(page, limit):
    req = PageRequest.from_query(page, limit)
    assert (req.page, req.limit) == (1, 1)


def test_skip_is_offset_of_page():
    assert PageRequest.from_query(3, 5).skip == 10


def test_meta_rounds_total_pages_up():
    assert page_meta(PageRequest(2, 5), 12) == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}


def test_meta_with_no_records():
    assert page_meta(PageRequest(1, 10), 0)["totalPages"] == 0
