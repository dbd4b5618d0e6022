from .v2_functions import (
    flash_fee,
    get_amount_in,
    get_amount_out,
    get_amounts_in,
    get_amounts_out,
    pool_reserve_lookup,
    quote,
    sort_tokens,
)
from .v2_liquidity_pool import UniswapV2Pool
from .v2_onchain_pool import OnchainUniswapV2Pool
from .v2_types import UniswapV2PoolSimulationResult, UniswapV2PoolState

__all__ = (
    "OnchainUniswapV2Pool",
    "UniswapV2Pool",
    "UniswapV2PoolSimulationResult",
    "UniswapV2PoolState",
    "flash_fee",
    "get_amount_in",
    "get_amount_out",
    "get_amounts_in",
    "get_amounts_out",
    "pool_reserve_lookup",
    "quote",
    "sort_tokens",
)
