"""Resolve human-readable color and size references to canonical ids.

Canonical ids are UUID strings. Anything else is treated as a name and
looked up in the Color or Size registry.
"""

from uuid import UUID

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.inventory.attributes import Color, Size


def is_canonical_id(value) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def _resolve(aggregate_cls, field, value):
    label = aggregate_cls.__name__
    if value is None or str(value).strip() == "":
        raise ValidationError({field: [f"{label} is required"]})
    if is_canonical_id(value):
        return str(value)

    record = current_domain.repository_for(aggregate_cls).find_by_name(str(value).strip())
    if record is None:
        raise ValidationError({field: [f"{label} not found: {value}"]})
    return str(record.id)


def resolve_color(value) -> str:
    return _resolve(Color, "color", value)


def resolve_size(value) -> str:
    return _resolve(Size, "size", value)


def resolve_line_items(items_data):
    """Return line item dicts with ``color_id``/``size_id`` resolved.

    Each input dict carries ``product``, ``color``, ``size``, ``quantity`` and
    ``price``; the ``*_id`` spellings are accepted too.
    """
    if not items_data:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    resolved = []
    for index, item in enumerate(items_data):
        product_id = item.get("product_id") or item.get("product")
        if not product_id:
            raise ValidationError({"items": [f"Item {index + 1} is missing a product"]})

        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": [f"Item {index + 1} quantity must be a whole number of at least 1"]})
        price = item.get("price", 0)
        if isinstance(price, bool) or not isinstance(price, int | float) or price < 0:
            raise ValidationError({"price": [f"Item {index + 1} price must be a non-negative number"]})

        resolved.append(
            {
                "product_id": str(product_id),
                "color_id": resolve_color(item.get("color_id") or item.get("color")),
                "size_id": resolve_size(item.get("size_id") or item.get("size")),
                "quantity": quantity,
                "price": float(price),
            }
        )
    return resolved
