from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .arbitrage import (
    ArbitrageCalculationResult,
    FlashSettlementEngine,
    FlashSettlementRequest,
    SettlementContext,
    SettlementResult,
    SettlementState,
    TwoPoolFlashArbitrage,
    quote_flash_settlement,
)
from .erc20 import LedgerTokenGateway
from .logging import logger
from .transaction import SimulationLedger, WorldState
from .uniswap import (
    OnchainUniswapV2Pool,
    UniswapV2Pool,
    UniswapV2PoolSimulationResult,
    UniswapV2PoolState,
    flash_fee,
    get_amount_in,
    get_amount_out,
    get_amounts_in,
    get_amounts_out,
    quote,
)

__all__ = (
    "ArbitrageCalculationResult",
    "FlashSettlementEngine",
    "FlashSettlementRequest",
    "LedgerTokenGateway",
    "OnchainUniswapV2Pool",
    "SettlementContext",
    "SettlementResult",
    "SettlementState",
    "SimulationLedger",
    "TwoPoolFlashArbitrage",
    "UniswapV2Pool",
    "UniswapV2PoolSimulationResult",
    "UniswapV2PoolState",
    "WorldState",
    "__version__",
    "flash_fee",
    "get_amount_in",
    "get_amount_out",
    "get_amounts_in",
    "get_amounts_out",
    "get_checksum_address",
    "logger",
    "quote",
    "quote_flash_settlement",
    "settings",
)
