"""Pydantic schemas for the payment processor tooling endpoint."""

from pydantic import BaseModel


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Your card was declined."
    decline_code: str | None = "generic_decline"
    refunds_succeed: bool | None = None


class GatewayConfig(BaseModel):
    gateway: str
    should_succeed: bool
    refunds_succeed: bool
    failure_reason: str
    decline_code: str | None = None


class GatewayConfigEnvelope(BaseModel):
    success: bool = True
    data: GatewayConfig
