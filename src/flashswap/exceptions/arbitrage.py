from typing import Any

from eth_typing import ChecksumAddress

from flashswap.exceptions.base import FlashSwapError

"""
Exceptions defined here are raised by classes and functions in the `arbitrage` module, and by the
multi-hop routing functions.
"""


class ArbitrageError(FlashSwapError):
    """
    Exception raised inside arbitrage helpers.
    """


class InvalidPath(ArbitrageError):
    """
    Raised when a swap path is too short or cannot be traversed.
    """

    def __init__(self, message: str = "Invalid path.") -> None:
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.message,)


class Unprofitable(ArbitrageError):
    def __init__(self, message: str = "No profitable input amount exists.") -> None:
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.message,)


class NoSolverSolution(ArbitrageError):
    def __init__(self, message: str = "Solver failed to converge on a solution.") -> None:
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.message,)


class SettlementError(ArbitrageError):
    """
    Exception raised by the flash settlement engine. Any of these aborts the whole settlement.
    """


class InvalidCallbackSender(SettlementError):
    """
    Raised when the swap callback is invoked by an address other than the pool the engine called.
    """

    def __init__(self, sender: ChecksumAddress | None) -> None:
        self.sender = sender
        super().__init__(message=f"Callback from unexpected sender {sender}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.sender,)


class InvalidInitiator(SettlementError):
    """
    Raised when the swap callback reports an initiator other than the engine itself.
    """

    def __init__(self, initiator: ChecksumAddress) -> None:
        self.initiator = initiator
        super().__init__(message=f"Swap was not initiated by this engine (initiator {initiator}).")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.initiator,)


class InsufficientProfit(SettlementError):
    def __init__(self, profit: int, min_profit: int) -> None:
        self.profit = profit
        self.min_profit = min_profit
        super().__init__(message=f"Profit {profit} is below the minimum {min_profit}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.profit, self.min_profit)


class SettlementContextMismatch(SettlementError):
    """
    Raised when decoded callback data does not correspond to the pending settlement.
    """

    def __init__(self) -> None:
        super().__init__(message="Callback data does not match the pending settlement.")


class SettlementAlreadyConsumed(SettlementError):
    def __init__(self) -> None:
        super().__init__(message="Settlement context was already consumed.")


class SettlementInProgress(SettlementError):
    def __init__(self) -> None:
        super().__init__(message="A settlement is already in progress.")


class UnexpectedBorrowAmount(SettlementError):
    """
    Raised when the amounts delivered by the lending pool differ from the requested principal.
    """

    def __init__(self, amount0_out: int, amount1_out: int) -> None:
        self.amount0_out = amount0_out
        self.amount1_out = amount1_out
        super().__init__(message=f"Unexpected delivered amounts ({amount0_out}, {amount1_out}).")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.amount0_out, self.amount1_out)
