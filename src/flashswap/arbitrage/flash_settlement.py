import dataclasses
import secrets
from collections.abc import Sequence

from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.erc20.token_gateway import LedgerTokenGateway
from flashswap.exceptions import FlashSwapValueError
from flashswap.exceptions.arbitrage import (
    InsufficientProfit,
    InvalidCallbackSender,
    InvalidInitiator,
    InvalidPath,
    SettlementAlreadyConsumed,
    SettlementContextMismatch,
    SettlementInProgress,
    UnexpectedBorrowAmount,
)
from flashswap.exceptions.liquidity_pool import InsufficientAmount, InsufficientLiquidity
from flashswap.logging import logger
from flashswap.transaction.world_state import WorldState
from flashswap.types.gateways import PoolGateway, TokenGateway
from flashswap.uniswap.v2_functions import flash_fee, get_amount_in, get_amount_out

from .types import FlashSettlementRequest, SettlementContext, SettlementResult, SettlementState


@dataclasses.dataclass(slots=True, frozen=True)
class SettlementQuote:
    token_borrowed: ChecksumAddress
    token_repaid: ChecksumAddress
    token_path: tuple[ChecksumAddress, ...]
    expected_output: int
    amount_to_repay: int

    @property
    def expected_profit(self) -> int:
        return self.expected_output - self.amount_to_repay


def _oriented_reserves(pool: PoolGateway, token_in: ChecksumAddress) -> tuple[int, int]:
    reserve0, reserve1, _ = pool.get_reserves()
    return (reserve0, reserve1) if token_in == pool.token0 else (reserve1, reserve0)


def build_token_path(
    token_in: ChecksumAddress,
    pools: Sequence[PoolGateway],
) -> tuple[ChecksumAddress, ...]:
    """
    Walk the pools in order starting from `token_in`, returning the token held at each step.
    """

    if not pools:
        raise InvalidPath(message="At least one pool is required.")

    path = [token_in]
    for pool in pools:
        match path[-1]:
            case pool.token0:
                path.append(pool.token1)
            case pool.token1:
                path.append(pool.token0)
            case _:
                raise InvalidPath(
                    message=f"Token {path[-1]} could not be matched. Pool {pool.address} holds "
                    f"{pool.token0} & {pool.token1}"
                )
    return tuple(path)


def calculate_pool_path_amounts_out(
    amount_in: int,
    pools: Sequence[PoolGateway],
    token_path: Sequence[ChecksumAddress],
) -> list[int]:
    """
    Chain `get_amount_out` through a sequence of pools. Reserves are read once from each pool.
    """

    amounts = [amount_in]
    for pool, token_in in zip(pools, token_path, strict=False):
        reserve_in, reserve_out = _oriented_reserves(pool, token_in)
        amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out))
    return amounts


def quote_flash_settlement(
    venue_a: PoolGateway,
    venue_b: Sequence[PoolGateway],
    borrow_token0: bool,
    amount_in: int,
) -> SettlementQuote:
    """
    Calculate the amounts for borrowing `amount_in` from `venue_a` and selling it through
    `venue_b`, using the current reserves.

    If the path through `venue_b` ends at the borrowed token, the loan is repaid in that token
    with the flash fee added. If it ends at the other token of `venue_a`, the repayment is the
    input that `venue_a` would require to release `amount_in` as a regular swap. Both round the
    amount owed up.
    """

    if not isinstance(amount_in, int):
        raise FlashSwapValueError(message=f"Amount {amount_in!r} is not an integer.")
    if amount_in < 0:
        raise FlashSwapValueError(message=f"Amount {amount_in} is negative.")
    if amount_in == 0:
        raise InsufficientAmount
    if any(pool.address == venue_a.address for pool in venue_b):
        raise InvalidPath(message="The lending pool cannot be part of the arbitrage path.")

    if borrow_token0:
        token_borrowed, token_paired = venue_a.token0, venue_a.token1
    else:
        token_borrowed, token_paired = venue_a.token1, venue_a.token0
    reserve_borrowed, reserve_paired = _oriented_reserves(venue_a, token_borrowed)

    if reserve_borrowed == 0 or reserve_paired == 0:
        raise InsufficientLiquidity
    if amount_in >= reserve_borrowed:
        raise InsufficientLiquidity(
            message=f"Requested borrow ({amount_in}) >= pool reserves ({reserve_borrowed})"
        )

    token_path = build_token_path(token_borrowed, venue_b)
    token_repaid = token_path[-1]
    if token_repaid == token_borrowed:
        amount_to_repay = amount_in + flash_fee(amount_in)
    elif token_repaid == token_paired:
        amount_to_repay = get_amount_in(amount_in, reserve_paired, reserve_borrowed)
    else:
        raise InvalidPath(
            message=f"The arbitrage path ends at {token_repaid}, which is not held by the lending "
            "pool."
        )

    expected_output = calculate_pool_path_amounts_out(amount_in, venue_b, token_path)[-1]

    return SettlementQuote(
        token_borrowed=token_borrowed,
        token_repaid=token_repaid,
        token_path=token_path,
        expected_output=expected_output,
        amount_to_repay=amount_to_repay,
    )


class FlashSettlementEngine:
    """
    Borrows a token from one pool through a flash swap, sells it through a second venue inside the
    lending pool's callback, repays the loan and sends the profit to the caller.

    Every settlement runs inside a savepoint of the world state: if any step fails, including the
    lending pool's final invariant check, every balance and pool reserve is restored and the
    exception propagates to the caller.
    """

    def __init__(
        self,
        address: ChecksumAddress | str,
        world: WorldState,
        token_gateway: TokenGateway | None = None,
    ) -> None:
        self.address = get_checksum_address(address)
        self.world = world
        self.token_gateway: TokenGateway = (
            token_gateway if token_gateway is not None else LedgerTokenGateway(world)
        )
        self.state = SettlementState.IDLE
        self._pending: SettlementContext | None = None
        self._result: SettlementResult | None = None
        self._consumed_id: bytes | None = None

        world.deploy(self.address, self)

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, state={self.state.name})"

    def _transition(self, state: SettlementState) -> None:
        logger.debug(f"Settlement {self._pending}: {self.state.name} -> {state.name}")
        self.state = state

    def initiate_arbitrage(
        self,
        venue_a: PoolGateway,
        venue_b: PoolGateway | Sequence[PoolGateway],
        borrow_token0: bool,
        amount_in: int,
        min_profit: int,
    ) -> int:
        """
        Borrow `amount_in` of token0 (`borrow_token0=True`) or token1 from `venue_a`, sell it
        through `venue_b`, and repay the loan. The profit is sent to the caller and returned.
        """

        request = FlashSettlementRequest(
            venue_a=venue_a,
            venue_b=tuple(venue_b) if isinstance(venue_b, Sequence) else (venue_b,),
            borrow_token0=borrow_token0,
            amount_in=amount_in,
            min_profit=min_profit,
            initiator=self.world.msg_sender,
        )
        return self.execute(request).profit

    def execute(self, request: FlashSettlementRequest) -> SettlementResult:
        """
        Execute a prepared settlement request.
        """

        if self._pending is not None:
            raise SettlementInProgress

        self.state = SettlementState.IDLE
        try:
            with self.world.atomic():
                context = self._begin_settlement(request)
                self._transition(SettlementState.BORROWED)
                with self.world.call_frame(self.address):
                    request.venue_a.swap(
                        *context.amounts_out,
                        self.address,
                        context.encode(),
                    )

                result = self._result
                if result is None or result.settlement_id != context.settlement_id:
                    # The lending pool returned without running the settlement
                    raise SettlementContextMismatch
                self._transition(SettlementState.REPAID)
        except Exception:
            self._transition(SettlementState.ABORTED)
            raise
        finally:
            self._pending = None
            self._consumed_id = None
            self._result = None

        logger.info(
            f"Settled {context}: borrowed {result.amount_borrowed} {result.token_borrowed}, "
            f"repaid {result.amount_repaid} {result.token_repaid}, profit {result.profit}"
        )
        return result

    def _begin_settlement(self, request: FlashSettlementRequest) -> SettlementContext:
        """
        Quote the request against current reserves and record the pending settlement context.
        """

        if self._pending is not None:
            raise SettlementInProgress
        if not isinstance(request.min_profit, int) or request.min_profit < 0:
            raise FlashSwapValueError(
                message=f"Minimum profit must be a non-negative integer, got {request.min_profit!r}"
            )

        self._transition(SettlementState.QUOTING)
        quote = quote_flash_settlement(
            venue_a=request.venue_a,
            venue_b=request.venue_b,
            borrow_token0=request.borrow_token0,
            amount_in=request.amount_in,
        )

        context = SettlementContext(
            settlement_id=secrets.token_bytes(32),
            venue_a=request.venue_a.address,
            venue_b=tuple(pool.address for pool in request.venue_b),
            borrow_token0=request.borrow_token0,
            token_borrowed=quote.token_borrowed,
            token_repaid=quote.token_repaid,
            token_path=quote.token_path,
            amount_in=request.amount_in,
            expected_output=quote.expected_output,
            amount_to_repay=quote.amount_to_repay,
            min_profit=request.min_profit,
            initiator=get_checksum_address(request.initiator),
        )
        self._pending = context

        logger.debug(
            f"Quoted {context}: borrow {context.amount_in} {context.token_borrowed}, expect "
            f"{context.expected_output} {context.token_repaid}, repay {context.amount_to_repay}"
        )
        return context

    def uniswap_v2_call(
        self,
        sender: ChecksumAddress | str,
        amount0_out: int,
        amount1_out: int,
        data: bytes,
    ) -> None:
        """
        The callback invoked by the lending pool after it has delivered the borrowed token.

        The caller must be the pool this engine is borrowing from, and the swap must have been
        initiated by this engine.
        """

        caller = self.world.msg_sender
        pending = self._pending
        if pending is None or caller != pending.venue_a:
            raise InvalidCallbackSender(sender=caller)

        _sender = get_checksum_address(sender)
        if _sender != self.address:
            raise InvalidInitiator(initiator=_sender)

        context = SettlementContext.decode(data)
        if context != pending:
            raise SettlementContextMismatch
        if self._consumed_id == context.settlement_id:
            raise SettlementAlreadyConsumed
        if (amount0_out, amount1_out) != context.amounts_out:
            raise UnexpectedBorrowAmount(amount0_out=amount0_out, amount1_out=amount1_out)
        self._consumed_id = context.settlement_id

        self._result = self._complete_settlement(context, (amount0_out, amount1_out))

    def _complete_settlement(
        self,
        context: SettlementContext,
        delivered: tuple[int, int],
    ) -> SettlementResult:
        """
        Sell the delivered tokens through the arbitrage path, check the profit, then repay the
        lending pool and pay the initiator.
        """

        # Only the context accepted by the callback may move the engine's tokens
        if (
            self._pending is None
            or context != self._pending
            or self._consumed_id != context.settlement_id
        ):
            raise InvalidCallbackSender(sender=self.world.msg_sender)

        self._transition(SettlementState.ARBITRATING)
        amount_borrowed = delivered[0] if context.borrow_token0 else delivered[1]
        amount_received = self._swap_through_path(context, amount_borrowed)

        self._transition(SettlementState.SETTLING)
        profit = amount_received - context.amount_to_repay
        if profit < context.min_profit:
            raise InsufficientProfit(profit=profit, min_profit=context.min_profit)

        with self.world.call_frame(self.address):
            self.token_gateway.transfer(
                token=context.token_repaid,
                to=context.venue_a,
                amount=context.amount_to_repay,
            )
            if profit > 0:
                self.token_gateway.transfer(
                    token=context.token_repaid,
                    to=context.initiator,
                    amount=profit,
                )

        return SettlementResult(
            settlement_id=context.settlement_id,
            token_borrowed=context.token_borrowed,
            token_repaid=context.token_repaid,
            amount_borrowed=amount_borrowed,
            amount_received=amount_received,
            amount_repaid=context.amount_to_repay,
            profit=profit,
            recipient=context.initiator,
        )

    def _swap_through_path(self, context: SettlementContext, amount_in: int) -> int:
        """
        Send `amount_in` of the borrowed token to the first pool of the path and swap along it,
        with each pool delivering its output to the next and the final pool paying this engine.
        Returns the amount of the repayment token received.
        """

        pools: list[PoolGateway] = [self.world.contract_at(pool) for pool in context.venue_b]

        with self.world.call_frame(self.address):
            self.token_gateway.transfer(
                token=context.token_borrowed,
                to=pools[0].address,
                amount=amount_in,
            )
            balance_before = self.token_gateway.balance_of(
                token=context.token_repaid,
                owner=self.address,
            )

            amount = amount_in
            for i, pool in enumerate(pools):
                token_in = context.token_path[i]
                reserve_in, reserve_out = _oriented_reserves(pool, token_in)
                amount = get_amount_out(amount, reserve_in, reserve_out)
                recipient = pools[i + 1].address if i + 1 < len(pools) else self.address
                amounts_out = (0, amount) if token_in == pool.token0 else (amount, 0)
                pool.swap(*amounts_out, recipient, b"")

            return (
                self.token_gateway.balance_of(token=context.token_repaid, owner=self.address)
                - balance_before
            )
