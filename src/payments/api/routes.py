"""FastAPI routes for payment processor tooling."""

from fastapi import APIRouter, HTTPException
from shared import config

from payments.api.schemas import ConfigureGatewayRequest, GatewayConfig, GatewayConfigEnvelope
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.put("/gateway/configure", response_model=GatewayConfigEnvelope)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigEnvelope:
    """Configure the FakeGateway behavior (non-production only).

    Lets manual API testing toggle declined charges and failing refunds.
    """
    if config.is_production():
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        decline_code=body.decline_code,
        refunds_succeed=body.refunds_succeed,
    )
    return GatewayConfigEnvelope(
        data=GatewayConfig(
            gateway=type(gateway).__name__,
            should_succeed=gateway.should_succeed,
            refunds_succeed=gateway.refunds_succeed,
            failure_reason=gateway.failure_reason,
            decline_code=gateway.decline_code,
        )
    )
