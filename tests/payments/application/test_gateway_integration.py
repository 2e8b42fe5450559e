"""Tests for gateway port/adapter integration."""

import pytest
from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import ChargeResult, RefundResult
from payments.gateway.stripe_adapter import StripeGateway


def _charge(gateway, key="test-1"):
    return gateway.create_and_confirm_charge(
        amount_minor_units=5999,
        currency="usd",
        method_token="pm_card_visa",
        return_url="http://localhost:8000/checkout/success",
        idempotency_key=key,
    )


class TestFakeGateway:
    def test_default_charge_succeeds(self):
        result = _charge(FakeGateway())
        assert isinstance(result, ChargeResult)
        assert result.success is True
        assert result.charge_id is not None
        assert result.status == "succeeded"

    def test_configured_charge_fails(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Insufficient funds", decline_code="insufficient_funds")
        result = _charge(gateway)
        assert result.success is False
        assert result.error_code == "card_declined"
        assert result.failure_reason == "Insufficient funds"
        assert result.decline_code == "insufficient_funds"

    def test_default_refund_succeeds(self):
        result = FakeGateway().refund("pi_123")
        assert isinstance(result, RefundResult)
        assert result.success is True
        assert result.refund_id is not None

    def test_refunds_follow_charges_unless_configured(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False)
        assert gateway.refund("pi_123").success is False

        gateway.configure(should_succeed=True, refunds_succeed=False)
        assert _charge(gateway).success is True
        assert gateway.refund("pi_123").success is False

    def test_call_logging(self):
        gateway = FakeGateway()
        _charge(gateway, key="test-log")
        gateway.refund("pi_123")
        assert [call["method"] for call in gateway.calls] == ["create_and_confirm_charge", "refund"]
        assert gateway.calls[0]["amount_minor_units"] == 5999
        assert gateway.calls[0]["idempotency_key"] == "test-log"
        assert gateway.calls_to("refund") == [{"method": "refund", "charge_id": "pi_123", "idempotency_key": None}]

    def test_refund_with_same_key_replays_the_original(self):
        gateway = FakeGateway()
        first = gateway.refund("pi_123", idempotency_key="refund-pi_123")
        second = gateway.refund("pi_123", idempotency_key="refund-pi_123")

        assert second == first
        assert len(gateway.calls_to("refund")) == 2
        assert list(gateway.refunds) == ["refund-pi_123"]

    def test_failed_refund_is_not_replayed(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=True, refunds_succeed=False)
        assert gateway.refund("pi_123", idempotency_key="refund-pi_123").success is False

        gateway.configure(should_succeed=True)
        assert gateway.refund("pi_123", idempotency_key="refund-pi_123").success is True


class TestGatewayFactory:
    def test_get_gateway_returns_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_GATEWAY", raising=False)
        assert isinstance(get_gateway(), FakeGateway)

    def test_get_gateway_is_cached(self):
        assert get_gateway() is get_gateway()

    def test_set_gateway_overrides(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom

    def test_reset_gateway_rebuilds(self):
        custom = FakeGateway()
        set_gateway(custom)
        reset_gateway()
        assert get_gateway() is not custom

    def test_stripe_is_built_from_config(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "stripe")
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
        gateway = get_gateway()
        assert isinstance(gateway, StripeGateway)
        assert gateway.api_key == "sk_test_123"

    def test_stripe_without_key_fails_fast(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "stripe")
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        with pytest.raises(RuntimeError):
            get_gateway()
