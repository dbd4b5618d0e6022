import dataclasses
import enum
from typing import Self

import eth_abi.abi
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from flashswap.checksum_cache import get_checksum_address
from flashswap.exceptions.arbitrage import SettlementContextMismatch
from flashswap.types.gateways import PoolGateway


class SettlementState(enum.Enum):
    IDLE = enum.auto()
    QUOTING = enum.auto()
    BORROWED = enum.auto()
    ARBITRATING = enum.auto()
    SETTLING = enum.auto()
    REPAID = enum.auto()
    ABORTED = enum.auto()


@dataclasses.dataclass(slots=True, frozen=True)
class ArbitrageCalculationResult:
    """
    The optimal principal for a flash arbitrage between two venues, and the expected amounts.
    """

    id: str
    borrow_token: ChecksumAddress
    profit_token: ChecksumAddress
    input_amount: int
    expected_output: int
    amount_to_repay: int
    profit_amount: int

    def __post_init__(self) -> None:
        assert self.input_amount != 0


@dataclasses.dataclass(slots=True, frozen=True)
class FlashSettlementRequest:
    """
    The parameters of a single flash settlement.

    `venue_a` lends the principal; the borrowed token is token0 if `borrow_token0` is set, token1
    otherwise. The borrowed token is sold through the pools of `venue_b` in order, and the final
    token of that path is the token used to repay `venue_a` and to pay the profit.
    """

    venue_a: PoolGateway
    venue_b: tuple[PoolGateway, ...]
    borrow_token0: bool
    amount_in: int
    min_profit: int
    initiator: ChecksumAddress


@dataclasses.dataclass(slots=True, frozen=True)
class SettlementContext:
    """
    The data passed through the lending pool's callback. It is encoded into the swap's callback
    data and decoded by the callback handler.
    """

    settlement_id: bytes
    venue_a: ChecksumAddress
    venue_b: tuple[ChecksumAddress, ...]
    borrow_token0: bool
    token_borrowed: ChecksumAddress
    token_repaid: ChecksumAddress
    token_path: tuple[ChecksumAddress, ...]
    amount_in: int
    expected_output: int
    amount_to_repay: int
    min_profit: int
    initiator: ChecksumAddress

    ABI_TYPES = (
        "bytes32",  # settlement_id
        "address",  # venue_a
        "address[]",  # venue_b
        "bool",  # borrow_token0
        "address",  # token_borrowed
        "address",  # token_repaid
        "address[]",  # token_path
        "uint256",  # amount_in
        "uint256",  # expected_output
        "uint256",  # amount_to_repay
        "uint256",  # min_profit
        "address",  # initiator
    )

    def __post_init__(self) -> None:
        assert len(self.settlement_id) == 32
        assert self.token_path[0] == self.token_borrowed
        assert self.token_path[-1] == self.token_repaid
        assert len(self.token_path) == len(self.venue_b) + 1

    @property
    def amounts_out(self) -> tuple[int, int]:
        """
        The (amount0_out, amount1_out) pair requested from `venue_a`.
        """

        return (self.amount_in, 0) if self.borrow_token0 else (0, self.amount_in)

    def encode(self) -> bytes:
        return eth_abi.abi.encode(
            types=self.ABI_TYPES,
            args=(
                self.settlement_id,
                self.venue_a,
                self.venue_b,
                self.borrow_token0,
                self.token_borrowed,
                self.token_repaid,
                self.token_path,
                self.amount_in,
                self.expected_output,
                self.amount_to_repay,
                self.min_profit,
                self.initiator,
            ),
        )

    @classmethod
    def decode(cls, data: bytes) -> Self:
        try:
            (
                settlement_id,
                venue_a,
                venue_b,
                borrow_token0,
                token_borrowed,
                token_repaid,
                token_path,
                amount_in,
                expected_output,
                amount_to_repay,
                min_profit,
                initiator,
            ) = eth_abi.abi.decode(types=cls.ABI_TYPES, data=data)
            return cls(
                settlement_id=bytes(settlement_id),
                venue_a=get_checksum_address(venue_a),
                venue_b=tuple(get_checksum_address(pool) for pool in venue_b),
                borrow_token0=borrow_token0,
                token_borrowed=get_checksum_address(token_borrowed),
                token_repaid=get_checksum_address(token_repaid),
                token_path=tuple(get_checksum_address(token) for token in token_path),
                amount_in=amount_in,
                expected_output=expected_output,
                amount_to_repay=amount_to_repay,
                min_profit=min_profit,
                initiator=get_checksum_address(initiator),
            )
        except (DecodingError, AssertionError, IndexError) as exc:
            raise SettlementContextMismatch from exc

    def __str__(self) -> str:
        return HexBytes(self.settlement_id).to_0x_hex()


@dataclasses.dataclass(slots=True, frozen=True)
class SettlementResult:
    settlement_id: bytes
    token_borrowed: ChecksumAddress
    token_repaid: ChecksumAddress
    amount_borrowed: int
    amount_received: int
    amount_repaid: int
    profit: int
    recipient: ChecksumAddress
