"""
Shared FastAPI dependencies.
"""

from parcel_tracker.app.services.tracking_gateway import ThailandPostGateway, tracking_gateway


async def get_tracking_gateway() -> ThailandPostGateway:
    """
    Get the shared tracking gateway.

    Tests override this dependency to inject a gateway with a mocked
    transport and a controllable cache clock.
    """
    return tracking_gateway
