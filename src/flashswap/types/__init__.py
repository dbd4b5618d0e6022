from .gateways import PoolGateway, SwapCallbackReceiver, TokenGateway

__all__ = (
    "PoolGateway",
    "SwapCallbackReceiver",
    "TokenGateway",
)
