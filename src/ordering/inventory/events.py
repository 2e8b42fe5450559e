"""Domain events for the Product, Color and Size aggregates."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductStocked:
    """A product was created together with its initial variant stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    variants = Text(required=True)  # JSON: list of {variant_id, color_id, size_id, stock}
    inventory = Integer(required=True)
    stocked_at = DateTime(required=True)


@ordering.event(part_of="Product")
class VariantStockChanged:
    """A variant's stock count moved, through the ledger or a direct admin edit."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    reason = String(required=True)  # reservation, restoration, fulfillment, adjustment
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@ordering.event(part_of="Product")
class ProductAvailabilityChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    available_for_sale = Boolean(required=True)
    inventory = Integer(required=True)


@ordering.event(part_of="Product")
class ProductRemoved:
    __version__ = 1

    product_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@ordering.event(part_of="Color")
class ColorRegistered:
    __version__ = 1

    color_id = Identifier(required=True)
    name = String(required=True)
    hex_code = String()


@ordering.event(part_of="Size")
class SizeRegistered:
    __version__ = 1

    size_id = Identifier(required=True)
    name = String(required=True)
