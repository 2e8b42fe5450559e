"""Variant Inventory Ledger.

Applies stock movements for order line items against Product aggregates:

- ``reserve``: all-or-nothing decrement at order placement. Every line is
  checked before anything is persisted, so a single short variant fails the
  whole reservation with ``InsufficientStock``.
- ``restore``: increment on cancellation. Unbounded.
- ``reduce_on_fulfillment``: decrement driven by status progression. Floors
  at zero instead of failing.

Check-then-write sequences run under one process-wide lock, which makes each
ledger call atomic with respect to every other ledger call. Given N
concurrent reservations of ``q`` units against stock ``S``, exactly
``S // q`` succeed.
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.inventory.product import Product

logger = structlog.get_logger(__name__)

_ledger_lock = threading.RLock()


@dataclass(frozen=True)
class StockLine:
    """A quantity of one product variant, addressed by (product, color, size)."""

    product_id: str
    color_id: str
    size_id: str
    quantity: int


class VariantLedger:
    def reserve(self, lines: Iterable[StockLine]) -> None:
        """Decrement stock for every line, or for none of them.

        Raises:
            ObjectNotFoundError: a product or one of its variants does not exist.
            InsufficientStock: a variant holds fewer units than requested.
        """
        lines = list(lines)
        with _ledger_lock:
            repo = current_domain.repository_for(Product)
            products = {}
            for line in lines:
                product = self._load(repo, products, line.product_id)
                if product is None:
                    raise ObjectNotFoundError({"product": [f"Product {line.product_id} does not exist"]})

                variant = product.variant_for(line.color_id, line.size_id)
                if variant is None:
                    raise ObjectNotFoundError(
                        {"variant": [f"Product {line.product_id} has no variant for the selected color and size"]}
                    )
                # Lines on the same variant draw down the same in-memory count.
                product.take_stock(variant, line.quantity)

            for product in products.values():
                repo.add(product)

        logger.info("Stock reserved", lines=len(lines), products=len(products))

    def restore(self, lines: Iterable[StockLine]) -> None:
        """Return units to stock. Missing products or variants are skipped."""
        self._apply(lines, "restore", self._return)

    def reduce_on_fulfillment(self, lines: Iterable[StockLine]) -> None:
        """Decrement stock without failing; each variant floors at zero."""
        self._apply(lines, "reduce", self._deplete)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _apply(self, lines, movement, move):
        """Run ``move(product, variant, quantity)`` for each line; ``movement`` labels the logs."""
        lines = list(lines)
        with _ledger_lock:
            repo = current_domain.repository_for(Product)
            products = {}
            for line in lines:
                product = self._load(repo, products, line.product_id)
                variant = product.variant_for(line.color_id, line.size_id) if product else None
                if variant is None:
                    logger.warning(
                        "Stock line skipped, variant no longer exists",
                        movement=movement,
                        product_id=line.product_id,
                        color_id=line.color_id,
                        size_id=line.size_id,
                        quantity=line.quantity,
                    )
                    continue

                move(product, variant, line.quantity)

            for product in filter(None, products.values()):
                repo.add(product)

        logger.info("Stock movement applied", movement=movement, lines=len(lines))

    @staticmethod
    def _return(product, variant, quantity):
        product.return_stock(variant, quantity)

    @staticmethod
    def _deplete(product, variant, quantity):
        shortfall = product.deplete_stock(variant, quantity)
        if shortfall:
            logger.warning(
                "Fulfillment decrement floored at zero",
                product_id=str(product.id),
                variant_id=str(variant.id),
                requested=quantity,
                shortfall=shortfall,
            )

    @staticmethod
    def _load(repo, cache, product_id):
        key = str(product_id)
        if key not in cache:
            try:
                cache[key] = repo.get(key)
            except ObjectNotFoundError:
                cache[key] = None
        return cache[key]
