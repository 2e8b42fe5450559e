"""Payment processor factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (default)
- StripeGateway when ``PAYMENT_GATEWAY=stripe``
"""

from shared import config

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    if config.get_payment_gateway_name() == "stripe":
        api_key = config.get_stripe_secret_key()
        if not api_key:
            raise RuntimeError("STRIPE_SECRET_KEY must be set when PAYMENT_GATEWAY=stripe")
        return StripeGateway(api_key=api_key)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment processor, building it from config on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment processor (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to the configured default processor."""
    global _current_gateway
    _current_gateway = None
