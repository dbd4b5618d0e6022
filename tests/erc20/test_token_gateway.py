import pytest

from flashswap.erc20 import LedgerTokenGateway
from flashswap.exceptions import FlashSwapValueError
from flashswap.exceptions.erc20 import InsufficientAllowance, InsufficientBalance, TransferFailure
from flashswap.transaction import WorldState

TOKEN = "0x1000000000000000000000000000000000000000"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"
CAROL = "0x00000000000000000000000000000000000ca401"


@pytest.fixture
def gateway(world: WorldState) -> LedgerTokenGateway:
    world.ledger.adjust(address=ALICE, token=TOKEN, amount=1_000)
    return LedgerTokenGateway(world)


def test_transfer(gateway: LedgerTokenGateway, world: WorldState) -> None:
    with world.call_frame(ALICE):
        gateway.transfer(token=TOKEN, to=BOB, amount=400)

    assert gateway.balance_of(token=TOKEN, owner=ALICE) == 600
    assert gateway.balance_of(token=TOKEN, owner=BOB) == 400


def test_transfer_insufficient_balance(gateway: LedgerTokenGateway, world: WorldState) -> None:
    with world.call_frame(BOB), pytest.raises(InsufficientBalance) as exc_info:
        gateway.transfer(token=TOKEN, to=ALICE, amount=1)

    assert exc_info.value.balance == 0
    assert exc_info.value.amount == 1
    assert isinstance(exc_info.value, TransferFailure)
    assert gateway.balance_of(token=TOKEN, owner=ALICE) == 1_000


def test_transfer_invalid_amounts(gateway: LedgerTokenGateway, world: WorldState) -> None:
    with world.call_frame(ALICE):
        with pytest.raises(TransferFailure):
            gateway.transfer(token=TOKEN, to=BOB, amount=-1)
        with pytest.raises(FlashSwapValueError):
            gateway.transfer(token=TOKEN, to=BOB, amount=1.0)  # type: ignore[arg-type]

    assert gateway.balance_of(token=TOKEN, owner=ALICE) == 1_000


def test_transfer_without_call_frame(gateway: LedgerTokenGateway) -> None:
    with pytest.raises(FlashSwapValueError):
        gateway.transfer(token=TOKEN, to=BOB, amount=1)


def test_approve_and_transfer_from(gateway: LedgerTokenGateway, world: WorldState) -> None:
    with world.call_frame(ALICE):
        gateway.approve(token=TOKEN, spender=BOB, amount=500)
    assert gateway.allowance(token=TOKEN, owner=ALICE, spender=BOB) == 500

    with world.call_frame(BOB):
        gateway.transfer_from(token=TOKEN, from_=ALICE, to=CAROL, amount=300)

    assert gateway.balance_of(token=TOKEN, owner=ALICE) == 700
    assert gateway.balance_of(token=TOKEN, owner=CAROL) == 300
    assert gateway.allowance(token=TOKEN, owner=ALICE, spender=BOB) == 200


def test_transfer_from_insufficient_allowance(
    gateway: LedgerTokenGateway, world: WorldState
) -> None:
    with world.call_frame(ALICE):
        gateway.approve(token=TOKEN, spender=BOB, amount=100)

    with world.call_frame(BOB), pytest.raises(InsufficientAllowance) as exc_info:
        gateway.transfer_from(token=TOKEN, from_=ALICE, to=BOB, amount=101)

    assert exc_info.value.allowance == 100
    assert gateway.balance_of(token=TOKEN, owner=ALICE) == 1_000
    assert gateway.allowance(token=TOKEN, owner=ALICE, spender=BOB) == 100


def test_transfer_from_insufficient_balance(
    gateway: LedgerTokenGateway, world: WorldState
) -> None:
    with world.call_frame(ALICE):
        gateway.approve(token=TOKEN, spender=BOB, amount=5_000)

    with world.call_frame(BOB), pytest.raises(InsufficientBalance):
        gateway.transfer_from(token=TOKEN, from_=ALICE, to=BOB, amount=1_001)

    # The allowance is only spent on success
    assert gateway.allowance(token=TOKEN, owner=ALICE, spender=BOB) == 5_000
