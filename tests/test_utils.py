"""
Unit tests for shared helpers.
"""
from datetime import datetime, timedelta

import pytest

from api.common.cache import generate_cache_key
from api.common.schemas import paginate
from api.common.utils import (
    parse_array_field, is_promotion_active, DEFAULT_TIMEZONE,
)


class TestParseArrayField:

    @pytest.mark.parametrize("raw, expected", [
        (None, []),
        ("", []),
        ('["a", "b"]', ["a", "b"]),
        (["a", "b"], ["a", "b"]),
        (['["a", "b"]', "c"], ["a", "b", "c"]),
        ("{a,b}", ["a", "b"]),
        ("solo", ["solo"]),
    ])
    def test_shapes(self, raw, expected):
        assert parse_array_field(raw) == expected


class TestPromotionActive:

    def test_not_flagged(self):
        assert is_promotion_active(False, None) is False

    def test_flagged_without_end_date(self):
        assert is_promotion_active(True, None) is True

    def test_future_and_past_end_dates(self):
        now = DEFAULT_TIMEZONE.localize(datetime(2025, 6, 1, 12, 0))

        assert is_promotion_active(True, now + timedelta(days=1), now=now) is True
        assert is_promotion_active(True, now - timedelta(minutes=1), now=now) is False

    def test_naive_end_date_is_store_local(self):
        now = DEFAULT_TIMEZONE.localize(datetime(2025, 6, 1, 12, 0))

        assert is_promotion_active(True, datetime(2025, 6, 1, 12, 30), now=now) is True


class TestMisc:

    def test_paginate(self):
        page = paginate(list(range(5)), page=2, size=2)

        assert page == {"items": [2, 3], "total": 5, "page": 2, "size": 2, "pages": 3}

    def test_cache_key_is_order_independent(self):
        a = generate_cache_key("products", {"q": "iphone", "page": 1, "category": None})
        b = generate_cache_key("products", {"page": 1, "q": "iphone"})

        assert a == b == "products:page=1:q=iphone"

