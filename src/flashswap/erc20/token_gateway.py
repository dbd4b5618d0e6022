from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.exceptions import FlashSwapValueError
from flashswap.exceptions.erc20 import InsufficientAllowance, InsufficientBalance, TransferFailure
from flashswap.logging import logger
from flashswap.transaction.simulation_ledger import SimulationLedger
from flashswap.transaction.world_state import WorldState


class LedgerTokenGateway:
    """
    ERC-20 transfer semantics over the world's simulation ledger.

    State-changing methods act on behalf of `world.msg_sender`. Failed checks raise a
    `TransferFailure` before any balance is touched.
    """

    def __init__(self, world: WorldState) -> None:
        self.world = world

    @property
    def ledger(self) -> SimulationLedger:
        return self.world.ledger

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if not isinstance(amount, int):
            raise FlashSwapValueError(message=f"Amount {amount!r} is not an integer.")
        if amount < 0:
            raise TransferFailure(message=f"Amount {amount} is negative.")

    def balance_of(self, token: ChecksumAddress | str, owner: ChecksumAddress | str) -> int:
        return self.ledger.token_balance(address=owner, token=token)

    def allowance(
        self,
        token: ChecksumAddress | str,
        owner: ChecksumAddress | str,
        spender: ChecksumAddress | str,
    ) -> int:
        return self.ledger.allowance(owner=owner, token=token, spender=spender)

    def _move(
        self,
        token: ChecksumAddress,
        from_: ChecksumAddress,
        to: ChecksumAddress,
        amount: int,
    ) -> None:
        balance = self.balance_of(token=token, owner=from_)
        if balance < amount:
            raise InsufficientBalance(token=token, owner=from_, balance=balance, amount=amount)
        self.ledger.transfer(token=token, amount=amount, from_addr=from_, to_addr=to)

    def transfer(
        self,
        token: ChecksumAddress | str,
        to: ChecksumAddress | str,
        amount: int,
    ) -> None:
        self._validate_amount(amount)
        sender = self.world.msg_sender
        _token = get_checksum_address(token)
        _to = get_checksum_address(to)
        self._move(token=_token, from_=sender, to=_to, amount=amount)
        logger.debug(f"TRANSFER: {amount} {_token} {sender} -> {_to}")

    def transfer_from(
        self,
        token: ChecksumAddress | str,
        from_: ChecksumAddress | str,
        to: ChecksumAddress | str,
        amount: int,
    ) -> None:
        self._validate_amount(amount)
        spender = self.world.msg_sender
        _token = get_checksum_address(token)
        _from = get_checksum_address(from_)
        _to = get_checksum_address(to)

        current_allowance = self.allowance(token=_token, owner=_from, spender=spender)
        if current_allowance < amount:
            raise InsufficientAllowance(
                token=_token,
                owner=_from,
                spender=spender,
                allowance=current_allowance,
                amount=amount,
            )

        self._move(token=_token, from_=_from, to=_to, amount=amount)
        self.ledger.set_allowance(
            owner=_from,
            token=_token,
            spender=spender,
            amount=current_allowance - amount,
        )
        logger.debug(f"TRANSFER_FROM: {amount} {_token} {_from} -> {_to} (spender {spender})")

    def approve(
        self,
        token: ChecksumAddress | str,
        spender: ChecksumAddress | str,
        amount: int,
    ) -> None:
        self._validate_amount(amount)
        self.ledger.set_allowance(
            owner=self.world.msg_sender,
            token=token,
            spender=spender,
            amount=amount,
        )
