import pytest

from flashswap.exceptions import EVMRevertError, FlashSwapValueError
from flashswap.transaction import WorldState

TOKEN = "0x1000000000000000000000000000000000000000"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def snapshot(self) -> int:
        return self.value

    def restore(self, snapshot: int) -> None:
        self.value = snapshot


def test_call_frames(world: WorldState) -> None:
    with pytest.raises(FlashSwapValueError):
        _ = world.msg_sender

    with world.call_frame(ALICE) as sender:
        assert sender == world.msg_sender
        assert world.msg_sender.lower() == ALICE
        with world.call_frame(BOB):
            assert world.msg_sender.lower() == BOB
        assert world.msg_sender.lower() == ALICE

    with pytest.raises(FlashSwapValueError):
        _ = world.msg_sender


def test_call_frame_is_popped_on_error(world: WorldState) -> None:
    with pytest.raises(ValueError), world.call_frame(ALICE):
        raise ValueError

    with pytest.raises(FlashSwapValueError):
        _ = world.msg_sender


def test_deploy_and_lookup(world: WorldState) -> None:
    contract = object()
    address = world.deploy(ALICE, contract)
    assert world.contract_at(ALICE.upper().replace("0X", "0x")) is contract
    assert world.contract_at(address) is contract

    # Redeploying the same object is allowed, replacing it is not
    world.deploy(ALICE, contract)
    with pytest.raises(FlashSwapValueError):
        world.deploy(ALICE, object())

    with pytest.raises(EVMRevertError):
        world.contract_at(BOB)


def test_atomic_commits_on_success(world: WorldState) -> None:
    counter = Counter()
    world.register(counter)

    with world.atomic():
        assert world.in_atomic_block
        counter.value = 5
        world.ledger.adjust(address=ALICE, token=TOKEN, amount=10)

    assert not world.in_atomic_block
    assert counter.value == 5
    assert world.ledger.token_balance(ALICE, TOKEN) == 10


def test_atomic_reverts_on_error(world: WorldState) -> None:
    counter = Counter()
    world.register(counter)
    world.ledger.adjust(address=ALICE, token=TOKEN, amount=10)

    with pytest.raises(RuntimeError), world.atomic():
        counter.value = 5
        world.ledger.transfer(token=TOKEN, amount=10, from_addr=ALICE, to_addr=BOB)
        raise RuntimeError

    assert not world.in_atomic_block
    assert counter.value == 0
    assert world.ledger.token_balance(ALICE, TOKEN) == 10
    assert world.ledger.token_balance(BOB, TOKEN) == 0


def test_nested_atomic_blocks(world: WorldState) -> None:
    counter = Counter()
    world.register(counter)
    # Registering twice does not duplicate the participant
    world.register(counter)

    with world.atomic():
        counter.value = 1
        with pytest.raises(RuntimeError), world.atomic():
            counter.value = 2
            raise RuntimeError
        # Only the inner block was undone
        assert counter.value == 1

    assert counter.value == 1

    with pytest.raises(RuntimeError), world.atomic():
        counter.value = 3
        with world.atomic():
            counter.value = 4
        raise RuntimeError

    # The outer failure undoes the committed inner block
    assert counter.value == 1
