"""Tests for the Product aggregate's variant stock and availability rules."""

import pytest
from ordering.inventory.events import ProductAvailabilityChanged, ProductStocked, VariantStockChanged
from ordering.inventory.product import Product
from protean.exceptions import ValidationError
from shared.exceptions import InsufficientStock


def _product(red_m=5, blue_l=2):
    return Product.create(
        name="Classic Tee",
        variants_data=[
            {"color_id": "red", "size_id": "m", "stock": red_m},
            {"color_id": "blue", "size_id": "l", "stock": blue_l},
        ],
    )


def _variant(product, color="red", size="m"):
    return product.variant_for(color, size)


class TestProductCreation:
    def test_inventory_is_sum_of_variants(self):
        assert _product().inventory == 7

    def test_product_with_stock_is_available(self):
        assert _product().available_for_sale is True

    def test_product_without_stock_is_unavailable(self):
        assert _product(red_m=0, blue_l=0).available_for_sale is False

    def test_creation_raises_product_stocked(self):
        product = _product()
        events = [e for e in product._events if isinstance(e, ProductStocked)]
        assert len(events) == 1
        assert events[0].inventory == 7

    def test_duplicate_variants_are_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Product.create(
                name="Dup",
                variants_data=[
                    {"color_id": "red", "size_id": "m", "stock": 1},
                    {"color_id": "red", "size_id": "m", "stock": 2},
                ],
            )
        assert "variants" in exc_info.value.messages

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _product(red_m=-1)


class TestVariantLookup:
    def test_finds_variant_by_color_and_size(self):
        variant = _variant(_product())
        assert variant.stock == 5

    def test_missing_combination_returns_none(self):
        assert _product().variant_for("red", "l") is None


class TestTakeStock:
    def test_decrements_variant(self):
        product = _product()
        product.take_stock(_variant(product), 3)
        assert _variant(product).stock == 2
        assert product.inventory == 4

    def test_exact_stock_can_be_taken(self):
        product = _product()
        product.take_stock(_variant(product), 5)
        assert _variant(product).stock == 0

    def test_insufficient_stock_reports_counts(self):
        product = _product()
        with pytest.raises(InsufficientStock) as exc_info:
            product.take_stock(_variant(product), 6)
        assert exc_info.value.available == 5
        assert exc_info.value.requested == 6
        assert exc_info.value.product_id == str(product.id)
        assert "quantity" in exc_info.value.messages
        assert _variant(product).stock == 5

    def test_stock_change_is_recorded(self):
        product = _product()
        product._events.clear()
        product.take_stock(_variant(product), 2)
        events = [e for e in product._events if isinstance(e, VariantStockChanged)]
        assert len(events) == 1
        assert events[0].reason == "reservation"
        assert events[0].previous_stock == 5
        assert events[0].new_stock == 3


class TestDepleteStock:
    def test_floors_at_zero(self):
        product = _product(red_m=2)
        shortfall = product.deplete_stock(_variant(product), 5)
        assert _variant(product).stock == 0
        assert shortfall == 3

    def test_within_stock_has_no_shortfall(self):
        product = _product()
        assert product.deplete_stock(_variant(product), 2) == 0
        assert _variant(product).stock == 3


class TestReturnStock:
    def test_increments_without_bound(self):
        product = _product()
        product.return_stock(_variant(product), 100)
        assert _variant(product).stock == 105


class TestAvailability:
    def test_selling_out_marks_unavailable(self):
        product = _product(red_m=1, blue_l=0)
        product._events.clear()
        product.take_stock(_variant(product), 1)
        assert product.available_for_sale is False
        changes = [e for e in product._events if isinstance(e, ProductAvailabilityChanged)]
        assert len(changes) == 1
        assert changes[0].available_for_sale is False

    def test_restocking_marks_available_again(self):
        product = _product(red_m=1, blue_l=0)
        product.take_stock(_variant(product), 1)
        product.return_stock(_variant(product), 1)
        assert product.available_for_sale is True

    def test_partial_sale_keeps_availability(self):
        product = _product()
        product._events.clear()
        product.take_stock(_variant(product), 1)
        assert product.available_for_sale is True
        assert not any(isinstance(e, ProductAvailabilityChanged) for e in product._events)


class TestAdjustStock:
    def test_sets_stock_directly(self):
        product = _product()
        variant = _variant(product)
        product.adjust_stock(variant.id, 12)
        assert _variant(product).stock == 12

    def test_unknown_variant_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _product().adjust_stock("nope", 3)
        assert "variant_id" in exc_info.value.messages

    def test_negative_value_is_rejected(self):
        product = _product()
        with pytest.raises(ValidationError):
            product.adjust_stock(_variant(product).id, -1)
