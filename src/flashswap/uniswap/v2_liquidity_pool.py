import dataclasses
from fractions import Fraction

from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.constants import MAX_UINT32, MAX_UINT112
from flashswap.erc20.token_gateway import LedgerTokenGateway
from flashswap.exceptions import EVMRevertError, FlashSwapValueError
from flashswap.exceptions.liquidity_pool import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidTo,
    KInvariantViolation,
    PoolLocked,
)
from flashswap.logging import logger
from flashswap.transaction.world_state import WorldState
from flashswap.types.abstract import AbstractLiquidityPool
from flashswap.types.aliases import Timestamp
from flashswap.uniswap.v2_functions import (
    DEFAULT_FEE,
    get_amount_in,
    get_amount_out,
    sort_tokens,
)
from flashswap.uniswap.v2_types import UniswapV2PoolSimulationResult, UniswapV2PoolState


class UniswapV2Pool(AbstractLiquidityPool):
    """
    A Uniswap V2-based liquidity pool implementing the x*y=k constant function invariant, executing
    against the balances held in a `WorldState`.
    """

    type PoolState = UniswapV2PoolState

    _state: PoolState

    FEE = DEFAULT_FEE

    def __init__(
        self,
        address: ChecksumAddress | str,
        tokens: tuple[ChecksumAddress | str, ChecksumAddress | str],
        world: WorldState,
        *,
        silent: bool = False,
    ) -> None:
        """
        A simulated pair contract holding two tokens.

        Arguments
        ---------
        address:
            The address of the pair. The pair is deployed to the world at this address.
        tokens:
            The two tokens held by the pair, in any order. They are stored in canonical order.
        world:
            The execution environment holding the token balances.
        silent:
            Suppress status output.
        """

        self.address = get_checksum_address(address)
        self.token0, self.token1 = sort_tokens(*tokens)
        self.world = world
        self._token_gateway = LedgerTokenGateway(world)
        self._locked = False
        self._state = UniswapV2PoolState(
            address=self.address,
            reserves_token0=0,
            reserves_token1=0,
            block_timestamp_last=0,
        )
        self.name = f"{self.token0}-{self.token1} ({self.__class__.__name__}, 0.30%)"

        world.deploy(self.address, self)
        world.register(self)

        if not silent:  # pragma: no cover
            logger.info(self.name)

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, token0={self.token0}, token1={self.token1})"  # noqa:E501

    @property
    def reserves_token0(self) -> int:
        return self.state.reserves_token0

    @property
    def reserves_token1(self) -> int:
        return self.state.reserves_token1

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def tokens(self) -> tuple[ChecksumAddress, ChecksumAddress]:
        return self.token0, self.token1

    def snapshot(self) -> PoolState:
        return self._state

    def restore(self, snapshot: PoolState) -> None:
        self._state = snapshot

    def get_reserves(self) -> tuple[int, int, Timestamp]:
        return (
            self.state.reserves_token0,
            self.state.reserves_token1,
            self.state.block_timestamp_last,
        )

    def _balances(self) -> tuple[int, int]:
        return (
            self._token_gateway.balance_of(token=self.token0, owner=self.address),
            self._token_gateway.balance_of(token=self.token1, owner=self.address),
        )

    def _update(self, balance0: int, balance1: int) -> None:
        if balance0 > MAX_UINT112 or balance1 > MAX_UINT112:
            raise EVMRevertError(error="OVERFLOW")
        if (balance0 == 0) != (balance1 == 0):
            raise InsufficientLiquidity(
                message=f"Reserves must be both zero or both positive, got ({balance0}, {balance1})"
            )

        self._state = dataclasses.replace(
            self.state,
            reserves_token0=balance0,
            reserves_token1=balance1,
            block_timestamp_last=self.world.timestamp % (MAX_UINT32 + 1),
        )
        logger.debug(f"[{self.name}] Sync: {balance0}, {balance1}")

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: ChecksumAddress | str,
        data: bytes = b"",
    ) -> None:
        """
        Send the requested outputs to `to`, optionally call back into `to`, then verify that the
        pool was paid enough to keep the fee-adjusted reserve product from decreasing.

        The whole operation is atomic: any failure restores all balances and pool states.
        """

        if self._locked:
            raise PoolLocked

        if amount0_out < 0 or amount1_out < 0:
            raise FlashSwapValueError(message="Swap outputs must be non-negative.")
        if amount0_out == 0 and amount1_out == 0:
            raise InsufficientOutputAmount

        reserve0, reserve1, _ = self.get_reserves()
        if amount0_out >= reserve0 or amount1_out >= reserve1:
            raise InsufficientLiquidity

        _to = get_checksum_address(to)
        if _to in self.tokens:
            raise InvalidTo(to=_to)

        # The initiator is recorded before entering the pool's own call frame
        sender = self.world.msg_sender

        self._locked = True
        try:
            with self.world.atomic(), self.world.call_frame(self.address):
                if amount0_out > 0:
                    self._token_gateway.transfer(token=self.token0, to=_to, amount=amount0_out)
                if amount1_out > 0:
                    self._token_gateway.transfer(token=self.token1, to=_to, amount=amount1_out)

                if data:
                    self.world.contract_at(_to).uniswap_v2_call(
                        sender,
                        amount0_out,
                        amount1_out,
                        data,
                    )

                balance0, balance1 = self._balances()

                amount0_in = (
                    balance0 - (reserve0 - amount0_out)
                    if balance0 > reserve0 - amount0_out
                    else 0
                )
                amount1_in = (
                    balance1 - (reserve1 - amount1_out)
                    if balance1 > reserve1 - amount1_out
                    else 0
                )
                if amount0_in == 0 and amount1_in == 0:
                    raise InsufficientInputAmount

                fee = self.FEE
                balance0_adjusted = balance0 * fee.denominator - amount0_in * fee.numerator
                balance1_adjusted = balance1 * fee.denominator - amount1_in * fee.numerator
                if balance0_adjusted * balance1_adjusted < (
                    reserve0 * reserve1 * fee.denominator**2
                ):
                    raise KInvariantViolation

                self._update(balance0, balance1)
                logger.debug(
                    f"[{self.name}] Swap: sender={sender}, in=({amount0_in}, {amount1_in}), "
                    f"out=({amount0_out}, {amount1_out}), to={_to}"
                )
        finally:
            self._locked = False

    def skim(self, to: ChecksumAddress | str) -> None:
        """
        Send any balance in excess of the recorded reserves to `to`.
        """

        if self._locked:
            raise PoolLocked

        balance0, balance1 = self._balances()
        with self.world.atomic(), self.world.call_frame(self.address):
            if (excess0 := balance0 - self.reserves_token0) > 0:
                self._token_gateway.transfer(token=self.token0, to=to, amount=excess0)
            if (excess1 := balance1 - self.reserves_token1) > 0:
                self._token_gateway.transfer(token=self.token1, to=to, amount=excess1)

    def sync(self) -> None:
        """
        Set the reserves to the current token balances held by the pool.
        """

        if self._locked:
            raise PoolLocked

        self._update(*self._balances())

    def _oriented_reserves(
        self,
        token_in: ChecksumAddress | str,
        override_state: PoolState | None,
    ) -> tuple[int, int]:
        state = self.state if override_state is None else override_state
        match get_checksum_address(token_in):
            case self.token0:
                return state.reserves_token0, state.reserves_token1
            case self.token1:
                return state.reserves_token1, state.reserves_token0
            case _:
                raise FlashSwapValueError(
                    message=f"Could not identify token {token_in}! Pool holds: {self.token0} {self.token1}"  # noqa:E501
                )

    def calculate_tokens_out_from_tokens_in(
        self,
        token_in: ChecksumAddress | str,
        token_in_quantity: int,
        override_state: PoolState | None = None,
    ) -> int:
        """
        Calculates the expected token OUTPUT for a target INPUT at current pool reserves.
        """

        if override_state:  # pragma: no cover
            logger.debug(f"State overrides applied: {override_state}")

        reserves_in, reserves_out = self._oriented_reserves(token_in, override_state)
        return get_amount_out(token_in_quantity, reserves_in, reserves_out)

    def calculate_tokens_in_from_tokens_out(
        self,
        token_out: ChecksumAddress | str,
        token_out_quantity: int,
        override_state: PoolState | None = None,
    ) -> int:
        """
        Calculates the required token INPUT of token_in for a target OUTPUT at current pool
        reserves.
        """

        if override_state:  # pragma: no cover
            logger.debug(f"State overrides applied: {override_state}")

        reserves_out, reserves_in = self._oriented_reserves(token_out, override_state)
        return get_amount_in(token_out_quantity, reserves_in, reserves_out)

    def get_absolute_exchange_rate(
        self,
        token: ChecksumAddress | str,
        override_state: PoolState | None = None,
    ) -> Fraction:
        """
        Get the absolute exchange rate for the given token, expressed in terms of a unit amount of
        its paired token.

        The exchange rate for a V2 pool is a simple ratio of the output token reserves to the input
        token reserves.
        """

        reserves_token, reserves_other = self._oriented_reserves(token, override_state)
        return Fraction(reserves_token, reserves_other)

    def simulate_exact_input_swap(
        self,
        token_in: ChecksumAddress | str,
        token_in_quantity: int,
        override_state: PoolState | None = None,
    ) -> UniswapV2PoolSimulationResult:
        """
        Simulate an exact input swap without changing the pool.
        """

        zero_for_one = get_checksum_address(token_in) == self.token0
        token_out_quantity = self.calculate_tokens_out_from_tokens_in(
            token_in=token_in,
            token_in_quantity=token_in_quantity,
            override_state=override_state,
        )
        token0_delta = -token_out_quantity if zero_for_one is False else token_in_quantity
        token1_delta = -token_out_quantity if zero_for_one is True else token_in_quantity

        initial_state = override_state or self.state
        return UniswapV2PoolSimulationResult(
            amount0_delta=token0_delta,
            amount1_delta=token1_delta,
            initial_state=initial_state,
            final_state=dataclasses.replace(
                initial_state,
                reserves_token0=initial_state.reserves_token0 + token0_delta,
                reserves_token1=initial_state.reserves_token1 + token1_delta,
            ),
        )
