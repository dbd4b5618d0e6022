from flashswap.exceptions.arbitrage import (
    ArbitrageError,
    InsufficientProfit,
    InvalidCallbackSender,
    InvalidInitiator,
    InvalidPath,
    NoSolverSolution,
    SettlementAlreadyConsumed,
    SettlementContextMismatch,
    SettlementError,
    SettlementInProgress,
    UnexpectedBorrowAmount,
    Unprofitable,
)
from flashswap.exceptions.base import FlashSwapError, FlashSwapTypeError, FlashSwapValueError
from flashswap.exceptions.erc20 import (
    Erc20TokenError,
    InsufficientAllowance,
    InsufficientBalance,
    TransferFailure,
)
from flashswap.exceptions.evm import EVMRevertError
from flashswap.exceptions.liquidity_pool import (
    IdenticalAddresses,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidTo,
    KInvariantViolation,
    LiquidityPoolError,
    PoolLocked,
    ReadOnlyPool,
    ZeroAddress,
)

from . import arbitrage, base, erc20, evm, liquidity_pool

__all__ = (
    "ArbitrageError",
    "EVMRevertError",
    "Erc20TokenError",
    "FlashSwapError",
    "FlashSwapTypeError",
    "FlashSwapValueError",
    "IdenticalAddresses",
    "InsufficientAllowance",
    "InsufficientAmount",
    "InsufficientBalance",
    "InsufficientInputAmount",
    "InsufficientLiquidity",
    "InsufficientOutputAmount",
    "InsufficientProfit",
    "InvalidCallbackSender",
    "InvalidInitiator",
    "InvalidPath",
    "InvalidTo",
    "KInvariantViolation",
    "LiquidityPoolError",
    "NoSolverSolution",
    "PoolLocked",
    "ReadOnlyPool",
    "SettlementAlreadyConsumed",
    "SettlementContextMismatch",
    "SettlementError",
    "SettlementInProgress",
    "TransferFailure",
    "UnexpectedBorrowAmount",
    "Unprofitable",
    "ZeroAddress",
    "arbitrage",
    "base",
    "erc20",
    "evm",
    "liquidity_pool",
)
