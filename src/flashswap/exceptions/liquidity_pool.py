from typing import Any

from eth_typing import ChecksumAddress

from flashswap.exceptions.base import FlashSwapError


class LiquidityPoolError(FlashSwapError):
    """
    Exception raised inside liquidity pool helpers and pool math functions.
    """


class InsufficientAmount(LiquidityPoolError):
    """
    Raised when a zero amount is provided to a price quote.
    """

    def __init__(self) -> None:
        super().__init__(message="Insufficient amount.")


class InsufficientInputAmount(LiquidityPoolError):
    """
    Raised when a swap input amount is zero, either supplied to the math or observed by the pool.
    """

    def __init__(self) -> None:
        super().__init__(message="Insufficient input amount.")


class InsufficientOutputAmount(LiquidityPoolError):
    """
    Raised when a swap output amount is zero.
    """

    def __init__(self) -> None:
        super().__init__(message="Insufficient output amount.")


class InsufficientLiquidity(LiquidityPoolError):
    """
    Raised when a pool reserve is zero, or an output request meets or exceeds the available reserve.
    """

    def __init__(self, message: str = "Insufficient liquidity.") -> None:
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.message,)


class IdenticalAddresses(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Token addresses are identical.")


class ZeroAddress(LiquidityPoolError):
    def __init__(self) -> None:
        super().__init__(message="Token address is the zero address.")


class InvalidTo(LiquidityPoolError):
    """
    Raised when a swap names one of the pool tokens as the recipient.
    """

    def __init__(self, to: ChecksumAddress) -> None:
        self.to = to
        super().__init__(message=f"Invalid swap recipient {to}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.to,)


class KInvariantViolation(LiquidityPoolError):
    """
    Raised when a swap would decrease the fee-adjusted constant product of the pool reserves.
    """

    def __init__(self) -> None:
        super().__init__(message="K")


class PoolLocked(LiquidityPoolError):
    """
    Raised when a pool is re-entered while a swap is in progress.
    """

    def __init__(self) -> None:
        super().__init__(message="Pool is locked.")


class ReadOnlyPool(LiquidityPoolError):
    """
    Raised when a state-changing operation is requested from a pool helper that can only read.
    """

    def __init__(self) -> None:
        super().__init__(message="This pool helper is read-only.")
