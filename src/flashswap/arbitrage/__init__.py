from .flash_settlement import (
    FlashSettlementEngine,
    SettlementQuote,
    build_token_path,
    calculate_pool_path_amounts_out,
    quote_flash_settlement,
)
from .two_pool_flash import TwoPoolFlashArbitrage
from .types import (
    ArbitrageCalculationResult,
    FlashSettlementRequest,
    SettlementContext,
    SettlementResult,
    SettlementState,
)

__all__ = (
    "ArbitrageCalculationResult",
    "FlashSettlementEngine",
    "FlashSettlementRequest",
    "SettlementContext",
    "SettlementQuote",
    "SettlementResult",
    "SettlementState",
    "TwoPoolFlashArbitrage",
    "build_token_path",
    "calculate_pool_path_amounts_out",
    "quote_flash_settlement",
)
