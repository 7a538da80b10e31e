"""Tests for pagination helpers"""

from aipilot_api.app.schemas.pagination import calculate_pagination, parse_pagination_params


def test_defaults():
    params = parse_pagination_params()
    assert (params.page, params.limit, params.offset) == (1, 10, 0)


def test_clamping_and_garbage():
    assert parse_pagination_params("0", "1000").page == 1
    assert parse_pagination_params("0", "1000").limit == 100
    assert parse_pagination_params("abc", "-5").limit == 1
    assert parse_pagination_params("abc", None).page == 1


def test_offset():
    assert parse_pagination_params("3", "20").offset == 40


def test_calculate():
    result = calculate_pagination(21, parse_pagination_params("2", "10"))
    assert result.model_dump(by_alias=True) == {
        "currentPage": 2,
        "totalPages": 3,
        "pageSize": 10,
        "totalItems": 21,
    }
