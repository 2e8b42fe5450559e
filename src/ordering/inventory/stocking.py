"""Catalogue stock administration: products, variant stock edits, colors and sizes."""

import json

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.inventory.attributes import Color, Size
from ordering.inventory.product import Product
from ordering.inventory.resolution import resolve_color, resolve_size

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Product")
class StockProduct:
    name = String(required=True, max_length=255)
    variants = Text(required=True)  # JSON: list of {color, size, stock}


@ordering.command(part_of="Product")
class AdjustVariantStock:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    stock = Integer(required=True)


@ordering.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@ordering.command(part_of="Color")
class RegisterColor:
    name = String(required=True, max_length=50)
    hex_code = String(max_length=7)


@ordering.command(part_of="Size")
class RegisterSize:
    name = String(required=True, max_length=20)


@ordering.repository(part_of=Product)
class ProductRepository:
    def remove(self, product):
        self._dao.delete(product)


@ordering.command_handler(part_of=Product)
class ProductStockHandler:
    @handle(StockProduct)
    def stock_product(self, command):
        variants = json.loads(command.variants) if isinstance(command.variants, str) else command.variants
        if not variants:
            raise ValidationError({"variants": ["A product needs at least one variant"]})

        variants_data = [
            {
                "color_id": resolve_color(variant.get("color_id") or variant.get("color")),
                "size_id": resolve_size(variant.get("size_id") or variant.get("size")),
                "stock": variant.get("stock", 0),
            }
            for variant in variants
        ]
        product = Product.create(name=command.name, variants_data=variants_data)
        current_domain.repository_for(Product).add(product)

        logger.info("Product stocked", product_id=str(product.id), inventory=product.inventory)
        return str(product.id)

    @handle(AdjustVariantStock)
    def adjust_variant_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.variant_id, command.stock)
        repo.add(product)

        logger.info(
            "Variant stock adjusted",
            product_id=str(product.id),
            variant_id=str(command.variant_id),
            stock=command.stock,
        )
        return str(product.id)

    @handle(RemoveProduct)
    def remove_product(self, command):
        from ordering.order.order import Order

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        active_orders = current_domain.repository_for(Order).active_for_product(product.id)
        if active_orders:
            order_ids = ", ".join(str(order.id) for order in active_orders)
            raise InvalidOperationError(f"Cannot delete product. It is referenced by active orders: {order_ids}")

        product.mark_removed()
        repo.remove(product)
        logger.info("Product removed", product_id=str(product.id))
        return str(product.id)


@ordering.command_handler(part_of=Color)
class ColorHandler:
    @handle(RegisterColor)
    def register_color(self, command):
        repo = current_domain.repository_for(Color)
        if repo.find_by_name(command.name.strip()) is not None:
            raise ValidationError({"name": [f"Color already exists: {command.name}"]})

        color = Color.register(command.name, hex_code=command.hex_code)
        repo.add(color)
        return str(color.id)


@ordering.command_handler(part_of=Size)
class SizeHandler:
    @handle(RegisterSize)
    def register_size(self, command):
        repo = current_domain.repository_for(Size)
        if repo.find_by_name(command.name.strip()) is not None:
            raise ValidationError({"name": [f"Size already exists: {command.name}"]})

        size = Size.register(command.name)
        repo.add(size)
        return str(size.id)
