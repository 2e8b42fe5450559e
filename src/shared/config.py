"""Environment-driven settings shared by the ordering and payments packages.

Every value is read at call time so tests and the dev server can change the
environment without re-importing modules.
"""

import os

_DEFAULT_ENVIRONMENT = "development"


def get_environment() -> str:
    """Return the active environment name (``PROTEAN_ENV`` wins)."""
    return (
        os.getenv("PROTEAN_ENV") or os.getenv("ENV") or os.getenv("ENVIRONMENT") or _DEFAULT_ENVIRONMENT
    ).lower()


def is_production() -> bool:
    return get_environment() == "production"


def get_log_dir() -> str:
    return os.getenv("LOG_DIR", "logs")


def get_payment_gateway_name() -> str:
    """Which processor adapter to build: ``fake`` (default) or ``stripe``."""
    return os.getenv("PAYMENT_GATEWAY", "fake").lower()


def get_stripe_secret_key() -> str | None:
    return os.getenv("STRIPE_SECRET_KEY")


def get_order_currency() -> str:
    return os.getenv("ORDER_CURRENCY", "usd").lower()


def get_checkout_return_url() -> str:
    """URL the processor redirects to after an off-session confirmation step."""
    base_url = os.getenv("BACKEND_API_URL", "http://localhost:8000").rstrip("/")
    return f"{base_url}/checkout/success"
