"""Product aggregate with its Variant entity.

Stock is tracked per variant, a (color, size) combination of the product.
The product's ``inventory`` is the sum of its variant stocks and is derived on
read, never stored. ``available_for_sale`` follows the inventory: it drops to
False when the last unit is gone and comes back when stock is added again.

All stock movement goes through the three ledger primitives below:
    take_stock     -- reservation, fails with InsufficientStock
    return_stock   -- restoration, unbounded
    deplete_stock  -- fulfillment decrement, floors at zero
plus ``adjust_stock`` for direct admin edits.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String
from shared.exceptions import InsufficientStock

from ordering.domain import ordering
from ordering.inventory.events import (
    ProductAvailabilityChanged,
    ProductRemoved,
    ProductStocked,
    VariantStockChanged,
)


@ordering.entity(part_of="Product")
class Variant:
    """One sellable (color, size) combination and its on-hand stock."""

    color_id = Identifier(required=True)
    size_id = Identifier(required=True)
    stock = Integer(required=True, min_value=0)

    def matches(self, color_id, size_id):
        return str(self.color_id) == str(color_id) and str(self.size_id) == str(size_id)


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    variants = HasMany(Variant)
    available_for_sale = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def variants_must_be_unique_per_color_and_size(self):
        keys = [(str(v.color_id), str(v.size_id)) for v in self.variants]
        if len(keys) != len(set(keys)):
            raise ValidationError({"variants": ["Each color and size combination may appear only once"]})

    @classmethod
    def create(cls, name, variants_data):
        """Create a product with its initial variants.

        Args:
            name: Product name.
            variants_data: List of dicts with color_id, size_id, stock.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name,
            variants=[
                Variant(color_id=v["color_id"], size_id=v["size_id"], stock=v.get("stock", 0)) for v in variants_data
            ],
            created_at=now,
            updated_at=now,
        )
        product.available_for_sale = product.inventory > 0

        product.raise_(
            ProductStocked(
                product_id=product.id,
                name=product.name,
                variants=json.dumps(
                    [
                        {
                            "variant_id": str(v.id),
                            "color_id": str(v.color_id),
                            "size_id": str(v.size_id),
                            "stock": v.stock,
                        }
                        for v in product.variants
                    ]
                ),
                inventory=product.inventory,
                stocked_at=now,
            )
        )
        return product

    @property
    def inventory(self):
        return sum(v.stock for v in self.variants)

    def variant_for(self, color_id, size_id):
        """Return the variant for a (color, size) pair, or None."""
        return next((v for v in self.variants if v.matches(color_id, size_id)), None)

    def variant_by_id(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    # -------------------------------------------------------------------
    # Stock movement
    # -------------------------------------------------------------------
    def take_stock(self, variant, quantity):
        """Reserve ``quantity`` units of a variant, or fail without changing anything."""
        if variant.stock < quantity:
            raise InsufficientStock(
                product_id=str(self.id),
                variant_id=str(variant.id),
                available=variant.stock,
                requested=quantity,
                product_name=self.name,
            )
        self._set_stock(variant, variant.stock - quantity, reason="reservation")

    def return_stock(self, variant, quantity):
        self._set_stock(variant, variant.stock + quantity, reason="restoration")

    def deplete_stock(self, variant, quantity):
        """Decrement for fulfillment, flooring at zero. Returns the units not covered."""
        shortfall = max(0, quantity - variant.stock)
        self._set_stock(variant, max(0, variant.stock - quantity), reason="fulfillment")
        return shortfall

    def adjust_stock(self, variant_id, stock):
        """Set a variant's stock directly (admin edit)."""
        variant = self.variant_by_id(variant_id)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found"]})
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})
        self._set_stock(variant, stock, reason="adjustment")

    def mark_removed(self):
        self.raise_(ProductRemoved(product_id=self.id, removed_at=datetime.now(UTC)))

    def _set_stock(self, variant, new_stock, reason):
        previous_stock = variant.stock
        if previous_stock == new_stock:
            return

        variant.stock = new_stock
        self.updated_at = datetime.now(UTC)
        self.raise_(
            VariantStockChanged(
                product_id=self.id,
                variant_id=variant.id,
                reason=reason,
                previous_stock=previous_stock,
                new_stock=new_stock,
            )
        )
        self._refresh_availability()

    def _refresh_availability(self):
        inventory = self.inventory
        if inventory == 0 and self.available_for_sale:
            self.available_for_sale = False
        elif inventory > 0 and not self.available_for_sale:
            self.available_for_sale = True
        else:
            return

        self.raise_(
            ProductAvailabilityChanged(
                product_id=self.id,
                available_for_sale=self.available_for_sale,
                inventory=inventory,
            )
        )
