"""
Unit tests for the par/order inference rules.
"""

import pytest
from ordersheet.models.inventory import ExtractedRow
from ordersheet.services.normalization import normalize_row, normalize_rows


def row(**kwargs):
    return ExtractedRow(description=kwargs.pop("description", "Rice"), **kwargs)


class TestResolvePar:
    @pytest.mark.parametrize("in_stock,order_raw", [(0, 0), (3, 0), (3, 7), (12, 2)])
    def test_written_par_is_trusted(self, in_stock, order_raw):
        item = normalize_row(row(in_stock_raw=in_stock, par_raw=6, order_raw=order_raw))
        assert item.par == 6

    def test_par_back_derived_from_stock_and_order(self):
        item = normalize_row(row(in_stock_raw=4, order_raw=3))
        assert item.par == 7

    def test_default_par_when_sheet_is_empty(self):
        item = normalize_row(row())
        assert item.par == 10
        assert item.order == 10

    def test_stock_plus_buffer_when_only_stock_written(self):
        item = normalize_row(row(in_stock_raw=2))
        assert item.par == 7
        assert item.order == 5


class TestResolveOrder:
    def test_written_order_wins_over_formula(self):
        # par - stock would be 2, the handwriting says 9
        item = normalize_row(row(in_stock_raw=8, par_raw=10, order_raw=9))
        assert item.order == 9

    def test_order_computed_when_not_written(self):
        item = normalize_row(row(in_stock_raw=4, par_raw=10))
        assert item.order == 6

    def test_order_never_negative(self):
        item = normalize_row(row(in_stock_raw=15, par_raw=10))
        assert item.order == 0


def test_rice_scenario():
    """Stock 3, nothing else written -> par 8, order 5"""
    item = normalize_row(row(description="Rice", in_stock_raw=3, par_raw=0, order_raw=0))
    assert (item.in_stock, item.par, item.order) == (3, 8, 5)


def test_missing_description_gets_placeholder():
    item = normalize_row(row(description=""))
    assert item.description == "Unknown Item"


def test_price_passed_through():
    item = normalize_row(row(price_raw=2.5))
    assert item.price == 2.5


def test_batch_stamps_vendor_and_unique_ids():
    items = normalize_rows([row(description="A"), row(description="B", vendor="Other")], vendor="Asian Vegetables")
    assert [i.vendor for i in items] == ["Asian Vegetables", "Asian Vegetables"]
    assert items[0].id != items[1].id
    assert all(i.id.startswith("item-") for i in items)


def test_model_item_coercion_defaults_to_zero():
    extracted = ExtractedRow.from_model_item(
        {"description": "Leeks", "column1_inStock": "abc", "column2_par": None, "column3_order": "4"},
        vendor="V",
    )
    assert extracted.in_stock_raw == 0
    assert extracted.par_raw == 0
    assert extracted.order_raw == 4
    assert extracted.price_raw == 0
    assert extracted.vendor == "V"
