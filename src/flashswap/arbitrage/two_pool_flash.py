import uuid
from collections.abc import Sequence

from eth_typing import ChecksumAddress
from scipy.optimize import OptimizeResult, minimize_scalar

from flashswap.checksum_cache import get_checksum_address
from flashswap.exceptions import EVMRevertError, FlashSwapValueError
from flashswap.exceptions.arbitrage import ArbitrageError, NoSolverSolution, Unprofitable
from flashswap.exceptions.liquidity_pool import LiquidityPoolError
from flashswap.logging import logger
from flashswap.types.abstract import AbstractArbitrage
from flashswap.types.gateways import PoolGateway

from .flash_settlement import SettlementQuote, quote_flash_settlement
from .types import ArbitrageCalculationResult, FlashSettlementRequest


class TwoPoolFlashArbitrage(AbstractArbitrage):
    """
    A flash arbitrage that borrows from a lending pool and sells through one or more other pools.
    The calculation finds the principal that maximizes the profit at current reserves.
    """

    def __init__(
        self,
        venue_a: PoolGateway,
        venue_b: PoolGateway | Sequence[PoolGateway],
        borrow_token0: bool,
        *,
        max_input: int | None = None,
        min_profit: int = 1,
        id: str | None = None,  # noqa:A002
    ) -> None:
        self.venue_a = venue_a
        self.venue_b: tuple[PoolGateway, ...] = (
            tuple(venue_b) if isinstance(venue_b, Sequence) else (venue_b,)
        )
        self.swap_pools = (venue_a, *self.venue_b)
        self.borrow_token0 = borrow_token0
        self.borrow_token: ChecksumAddress = venue_a.token0 if borrow_token0 else venue_a.token1
        self.id = id if id is not None else uuid.uuid4().hex

        if max_input is not None and max_input <= 0:
            raise FlashSwapValueError(message="Maximum input must be positive.")
        self.max_input = max_input

        if min_profit < 0:
            raise FlashSwapValueError(message="Minimum profit must be non-negative.")
        self.min_profit = min_profit

    def __str__(self) -> str:
        return self.id

    def _upper_bound(self) -> int:
        reserve0, reserve1, _ = self.venue_a.get_reserves()
        # The principal must stay below the lending pool's reserve
        borrowable = (reserve0 if self.borrow_token0 else reserve1) - 1
        return borrowable if self.max_input is None else min(self.max_input, borrowable)

    def quote(self, amount_in: int) -> SettlementQuote:
        return quote_flash_settlement(
            venue_a=self.venue_a,
            venue_b=self.venue_b,
            borrow_token0=self.borrow_token0,
            amount_in=amount_in,
        )

    def calculate_profit(self, amount_in: int) -> int:
        """
        The expected profit for borrowing `amount_in`, which may be negative.
        """

        return self.quote(amount_in).expected_profit

    def _solver_profit(self, x: float) -> float:
        try:
            return float(self.calculate_profit(int(x)))
        except (EVMRevertError, LiquidityPoolError):  # pragma: no cover
            # The optimizer might send invalid amounts into the calculation during iteration.
            # Treat these as unprofitable so the search continues
            return 0.0

    def calculate(self) -> ArbitrageCalculationResult:
        """
        Calculate the principal with the highest profit, using the borrowable reserve (or the
        configured maximum input) as an upper bound.
        """

        max_input = self._upper_bound()
        if max_input < 1:
            raise Unprofitable(message="The lending pool has no borrowable reserves.")

        if max_input == 1:
            best_input = 1
        else:
            # The bounded Brent optimizer requires bounds for the input amount, and a bracketed
            # guess to initiate the search
            bounds: tuple[float, float] = (1.0, float(max_input))
            bracket: tuple[float, float] = (0.25 * max_input, 0.50 * max_input)

            # Negate the profit to make the curve compatible with a minimizing solver
            opt: OptimizeResult = minimize_scalar(
                fun=lambda x: -self._solver_profit(x),
                method="bounded",
                bounds=bounds,
                bracket=bracket,
                options={"xatol": 1.0},
            )
            if not opt.success:
                raise NoSolverSolution(message=str(opt.message))

            # The solution is a float, so check the integers on either side
            candidates = {max(1, int(opt.x)), min(max_input, int(opt.x) + 1)}
            best_input = max(candidates, key=self.calculate_profit)

        quote = self.quote(best_input)
        if quote.expected_profit <= 0:
            raise Unprofitable

        logger.debug(
            f"Arbitrage {self.id}: borrow {best_input} {quote.token_borrowed}, expect profit "
            f"{quote.expected_profit} {quote.token_repaid}"
        )

        return ArbitrageCalculationResult(
            id=self.id,
            borrow_token=quote.token_borrowed,
            profit_token=quote.token_repaid,
            input_amount=best_input,
            expected_output=quote.expected_output,
            amount_to_repay=quote.amount_to_repay,
            profit_amount=quote.expected_profit,
        )

    def build_request(
        self,
        initiator: ChecksumAddress | str,
        min_profit: int | None = None,
    ) -> FlashSettlementRequest:
        """
        Calculate the optimal principal and package it into a request for the settlement engine.
        """

        result = self.calculate()
        _min_profit = self.min_profit if min_profit is None else min_profit
        if result.profit_amount < _min_profit:
            raise ArbitrageError(
                message=f"Expected profit {result.profit_amount} is below the minimum "
                f"{_min_profit}."
            )

        return FlashSettlementRequest(
            venue_a=self.venue_a,
            venue_b=self.venue_b,
            borrow_token0=self.borrow_token0,
            amount_in=result.input_amount,
            min_profit=_min_profit,
            initiator=get_checksum_address(initiator),
        )
