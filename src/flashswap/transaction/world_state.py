import contextlib
from collections.abc import Generator
from typing import Any, Protocol

from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.exceptions import EVMRevertError, FlashSwapValueError
from flashswap.logging import logger
from flashswap.transaction.simulation_ledger import SimulationLedger
from flashswap.types.aliases import Timestamp


class Journaled(Protocol):
    """
    Holds state that must be restored when an atomic execution fails.
    """

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


class WorldState:
    """
    A single-threaded execution environment for simulated contracts.

    The world owns the token ledger, tracks the sender of the active call frame, and provides
    savepoints that undo every change to registered participants if the enclosed block raises.
    """

    def __init__(self, timestamp: Timestamp = 0) -> None:
        self.ledger = SimulationLedger()
        self.timestamp = timestamp
        self._frames: list[ChecksumAddress] = []
        self._participants: list[Journaled] = [self.ledger]
        self._savepoint_depth = 0
        self._contracts: dict[ChecksumAddress, Any] = {}

    @property
    def msg_sender(self) -> ChecksumAddress:
        """
        The address making the current call.
        """

        try:
            return self._frames[-1]
        except IndexError:
            raise FlashSwapValueError(message="No active call frame.") from None

    @property
    def in_atomic_block(self) -> bool:
        return self._savepoint_depth > 0

    def register(self, participant: Journaled) -> None:
        """
        Track a participant so that its state is captured by subsequent savepoints.
        """

        if not any(participant is p for p in self._participants):
            self._participants.append(participant)

    def deploy(self, address: ChecksumAddress | str, contract: Any) -> ChecksumAddress:
        """
        Make `contract` reachable at `address`, so that other contracts can call into it.
        """

        _address = get_checksum_address(address)
        if _address in self._contracts and self._contracts[_address] is not contract:
            raise FlashSwapValueError(message=f"A contract is already deployed at {_address}")
        self._contracts[_address] = contract
        return _address

    def contract_at(self, address: ChecksumAddress | str) -> Any:
        """
        Get the contract deployed at `address`.
        """

        _address = get_checksum_address(address)
        try:
            return self._contracts[_address]
        except KeyError:
            raise EVMRevertError(error=f"No contract deployed at {_address}") from None

    @contextlib.contextmanager
    def call_frame(
        self,
        sender: ChecksumAddress | str,
    ) -> Generator[ChecksumAddress, None, None]:
        """
        Execute the enclosed block with `sender` as the caller.
        """

        _sender = get_checksum_address(sender)
        self._frames.append(_sender)
        try:
            yield _sender
        finally:
            self._frames.pop()

    @contextlib.contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """
        Execute the enclosed block as a single unit. If an exception escapes the block, the state
        of every registered participant is restored to its value at entry and the exception is
        re-raised. Savepoints may be nested.
        """

        snapshots = [(participant, participant.snapshot()) for participant in self._participants]
        self._savepoint_depth += 1
        try:
            yield
        except Exception as exc:
            for participant, snapshot in reversed(snapshots):
                participant.restore(snapshot)
            logger.debug(
                f"Reverted {len(snapshots)} participants at depth {self._savepoint_depth}: {exc!r}"
            )
            raise
        finally:
            self._savepoint_depth -= 1
