"""Ordering bounded context: orders, variant inventory and reference data.

Holds the order state machine, the Product/Variant stock ledger, and the
Color and Size registries used to resolve variant names. Card payments go
through the Payment Coordinator in the ``payments`` package.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
