import dataclasses
import pickle
from fractions import Fraction

import pytest

from flashswap.exceptions import EVMRevertError, FlashSwapValueError
from flashswap.exceptions.liquidity_pool import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidTo,
    KInvariantViolation,
    PoolLocked,
)
from flashswap.transaction import WorldState
from flashswap.uniswap import UniswapV2Pool, UniswapV2PoolState, get_amount_in, get_amount_out

TOKEN_X = "0x1000000000000000000000000000000000000000"
TOKEN_Y = "0x2000000000000000000000000000000000000000"
POOL_ADDRESS = "0x0000000000000000000000000000000000001001"
TRADER = "0x0000000000000000000000000000000000005000"


class PayingReceiver:
    """
    Pays a fixed amount of one token back to the pool from inside the swap callback.
    """

    def __init__(self, world: WorldState, address: str, token: str, amount: int) -> None:
        self.world = world
        self.address = address
        self.token = token
        self.amount = amount
        self.calls: list[tuple[str, int, int, bytes]] = []
        world.deploy(address, self)

    def uniswap_v2_call(self, sender: str, amount0_out: int, amount1_out: int, data: bytes):
        self.calls.append((sender, amount0_out, amount1_out, data))
        pool_address = self.world.msg_sender
        self.world.ledger.transfer(
            token=self.token,
            amount=self.amount,
            from_addr=self.address,
            to_addr=pool_address,
        )


class ReenteringReceiver:
    def __init__(self, world: WorldState, address: str, pool: UniswapV2Pool) -> None:
        self.world = world
        self.address = address
        self.pool = pool
        world.deploy(address, self)

    def uniswap_v2_call(self, sender: str, amount0_out: int, amount1_out: int, data: bytes):
        with self.world.call_frame(self.address):
            self.pool.swap(1, 0, self.address)


@pytest.fixture
def pool(make_pool) -> UniswapV2Pool:
    return make_pool(POOL_ADDRESS, TOKEN_X, TOKEN_Y, 1_000_000, 2_000_000)


def test_create_pool(pool: UniswapV2Pool, world: WorldState) -> None:
    assert pool.token0 == TOKEN_X
    assert pool.token1 == TOKEN_Y
    assert pool.tokens == (TOKEN_X, TOKEN_Y)
    assert pool.reserves_token0 == 1_000_000
    assert pool.reserves_token1 == 2_000_000
    assert pool.get_reserves() == (1_000_000, 2_000_000, 1_700_000_000)
    assert world.contract_at(POOL_ADDRESS) is pool


def test_tokens_are_sorted(world: WorldState) -> None:
    pool = UniswapV2Pool(address=POOL_ADDRESS, tokens=(TOKEN_Y, TOKEN_X), world=world, silent=True)
    assert pool.token0 == TOKEN_X
    assert pool.token1 == TOKEN_Y


def test_pool_equality_and_hashing(pool: UniswapV2Pool) -> None:
    assert pool == POOL_ADDRESS
    assert pool == POOL_ADDRESS.lower()
    assert pool != "0x0000000000000000000000000000000000009999"
    assert {pool: True}[pool] is True


def test_exact_input_swap(pool: UniswapV2Pool, world: WorldState) -> None:
    amount_in = 10_000
    amount_out = get_amount_out(amount_in, 1_000_000, 2_000_000)

    world.ledger.adjust(address=TRADER, token=TOKEN_X, amount=amount_in)
    with world.call_frame(TRADER):
        world.ledger.transfer(
            token=TOKEN_X, amount=amount_in, from_addr=TRADER, to_addr=pool.address
        )
        pool.swap(0, amount_out, TRADER)

    assert world.ledger.token_balance(TRADER, TOKEN_Y) == amount_out
    assert world.ledger.token_balance(TRADER, TOKEN_X) == 0
    assert pool.reserves_token0 == 1_000_000 + amount_in
    assert pool.reserves_token1 == 2_000_000 - amount_out


def test_exact_output_swap(pool: UniswapV2Pool, world: WorldState) -> None:
    amount_out = 5_000
    amount_in = get_amount_in(amount_out, 2_000_000, 1_000_000)

    world.ledger.adjust(address=TRADER, token=TOKEN_Y, amount=amount_in)
    with world.call_frame(TRADER):
        world.ledger.transfer(
            token=TOKEN_Y, amount=amount_in, from_addr=TRADER, to_addr=pool.address
        )
        pool.swap(amount_out, 0, TRADER)

    assert world.ledger.token_balance(TRADER, TOKEN_X) == amount_out
    assert pool.reserves_token1 == 2_000_000 + amount_in


def test_underpaid_swap_reverts(pool: UniswapV2Pool, world: WorldState) -> None:
    amount_in = 10_000
    amount_out = get_amount_out(amount_in, 1_000_000, 2_000_000)
    world.ledger.adjust(address=TRADER, token=TOKEN_X, amount=amount_in)

    with world.call_frame(TRADER):
        world.ledger.transfer(
            token=TOKEN_X, amount=amount_in, from_addr=TRADER, to_addr=pool.address
        )
        with pytest.raises(KInvariantViolation):
            pool.swap(0, amount_out + 1, TRADER)

    # The output transfer was undone
    assert world.ledger.token_balance(TRADER, TOKEN_Y) == 0
    assert pool.get_reserves() == (1_000_000, 2_000_000, 1_700_000_000)
    assert pool._locked is False


def test_unpaid_swap_reverts(pool: UniswapV2Pool, world: WorldState) -> None:
    with world.call_frame(TRADER), pytest.raises(InsufficientInputAmount):
        pool.swap(0, 1_000, TRADER)
    assert world.ledger.token_balance(TRADER, TOKEN_Y) == 0


def test_swap_argument_checks(pool: UniswapV2Pool, world: WorldState) -> None:
    with world.call_frame(TRADER):
        with pytest.raises(InsufficientOutputAmount):
            pool.swap(0, 0, TRADER)
        with pytest.raises(FlashSwapValueError):
            pool.swap(-1, 0, TRADER)
        with pytest.raises(InsufficientLiquidity):
            pool.swap(1_000_000, 0, TRADER)
        with pytest.raises(InsufficientLiquidity):
            pool.swap(0, 2_000_001, TRADER)
        with pytest.raises(InvalidTo):
            pool.swap(1, 0, TOKEN_X)


def test_flash_swap_with_callback(pool: UniswapV2Pool, world: WorldState) -> None:
    receiver_address = "0x0000000000000000000000000000000000006000"
    borrowed = 10_000
    fee = 31
    receiver = PayingReceiver(world, receiver_address, TOKEN_X, borrowed + fee)
    world.ledger.adjust(address=receiver_address, token=TOKEN_X, amount=fee)

    with world.call_frame(TRADER):
        pool.swap(borrowed, 0, receiver_address, b"\x01")

    assert receiver.calls == [(TRADER, borrowed, 0, b"\x01")]
    assert world.ledger.token_balance(receiver_address, TOKEN_X) == 0
    assert pool.reserves_token0 == 1_000_000 + fee


def test_flash_swap_underpaid_fee_reverts(pool: UniswapV2Pool, world: WorldState) -> None:
    receiver_address = "0x0000000000000000000000000000000000006000"
    borrowed = 10_000
    PayingReceiver(world, receiver_address, TOKEN_X, borrowed + 30)
    world.ledger.adjust(address=receiver_address, token=TOKEN_X, amount=30)

    with world.call_frame(TRADER), pytest.raises(KInvariantViolation):
        pool.swap(borrowed, 0, receiver_address, b"\x01")

    assert world.ledger.token_balance(receiver_address, TOKEN_X) == 30
    assert world.ledger.token_balance(pool.address, TOKEN_X) == 1_000_000


def test_swap_reentrancy_is_locked(pool: UniswapV2Pool, world: WorldState) -> None:
    receiver_address = "0x0000000000000000000000000000000000006000"
    ReenteringReceiver(world, receiver_address, pool)

    with world.call_frame(TRADER), pytest.raises(PoolLocked):
        pool.swap(1_000, 0, receiver_address, b"\x01")
    assert pool._locked is False


def test_callback_to_address_without_contract_reverts(
    pool: UniswapV2Pool, world: WorldState
) -> None:
    with world.call_frame(TRADER), pytest.raises(EVMRevertError):
        pool.swap(1_000, 0, TRADER, b"\x01")
    assert world.ledger.token_balance(TRADER, TOKEN_X) == 0


def test_skim_and_sync(pool: UniswapV2Pool, world: WorldState) -> None:
    world.ledger.adjust(address=pool.address, token=TOKEN_X, amount=500)
    assert pool.reserves_token0 == 1_000_000

    pool.skim(TRADER)
    assert world.ledger.token_balance(TRADER, TOKEN_X) == 500
    assert pool.reserves_token0 == 1_000_000

    world.ledger.adjust(address=pool.address, token=TOKEN_Y, amount=700)
    pool.sync()
    assert pool.reserves_token1 == 2_000_700


def test_sync_overflow(pool: UniswapV2Pool, world: WorldState) -> None:
    world.ledger.adjust(address=pool.address, token=TOKEN_X, amount=2**112)
    with pytest.raises(EVMRevertError):
        pool.sync()


def test_timestamp_is_recorded(pool: UniswapV2Pool, world: WorldState) -> None:
    world.timestamp = 2**32 + 5
    world.ledger.adjust(address=pool.address, token=TOKEN_X, amount=1)
    pool.sync()
    assert pool.get_reserves()[2] == 5


def test_calculations(pool: UniswapV2Pool) -> None:
    assert pool.calculate_tokens_out_from_tokens_in(TOKEN_X, 10_000) == get_amount_out(
        10_000, 1_000_000, 2_000_000
    )
    assert pool.calculate_tokens_out_from_tokens_in(TOKEN_Y, 10_000) == get_amount_out(
        10_000, 2_000_000, 1_000_000
    )
    assert pool.calculate_tokens_in_from_tokens_out(TOKEN_X, 10_000) == get_amount_in(
        10_000, 2_000_000, 1_000_000
    )
    assert pool.get_absolute_exchange_rate(TOKEN_X) == Fraction(1, 2)

    with pytest.raises(FlashSwapValueError):
        pool.calculate_tokens_out_from_tokens_in(TRADER, 10_000)


def test_calculations_with_override(pool: UniswapV2Pool) -> None:
    override = UniswapV2PoolState(
        address=pool.address,
        reserves_token0=5_000_000,
        reserves_token1=5_000_000,
    )
    assert pool.calculate_tokens_out_from_tokens_in(
        TOKEN_X, 10_000, override_state=override
    ) == get_amount_out(10_000, 5_000_000, 5_000_000)


def test_simulate_exact_input_swap(pool: UniswapV2Pool) -> None:
    amount_out = get_amount_out(10_000, 1_000_000, 2_000_000)
    result = pool.simulate_exact_input_swap(TOKEN_X, 10_000)

    assert result.amount0_delta == 10_000
    assert result.amount1_delta == -amount_out
    assert result.initial_state == pool.state
    assert result.final_state == dataclasses.replace(
        pool.state,
        reserves_token0=1_010_000,
        reserves_token1=2_000_000 - amount_out,
    )
    # The pool itself is unchanged
    assert pool.reserves_token0 == 1_000_000


def test_pool_state_is_picklable(pool: UniswapV2Pool) -> None:
    assert pickle.loads(pickle.dumps(pool.state)) == pool.state


def test_inconsistent_state_is_rejected() -> None:
    with pytest.raises(AssertionError):
        UniswapV2PoolState(address=POOL_ADDRESS, reserves_token0=1, reserves_token1=0)
