from typing import Any, Protocol

from eth_typing import ChecksumAddress

from flashswap.types.aliases import Timestamp


class PoolGateway(Protocol):
    """
    Can report the reserves and token identities of a constant product pool, and execute a swap
    that delivers the output to a recipient before checking that the pool was paid.
    """

    address: ChecksumAddress
    token0: ChecksumAddress
    token1: ChecksumAddress

    def get_reserves(self) -> tuple[int, int, Timestamp]:
        """
        Return the pool reserves for token0 and token1, and the timestamp of the last update
        """

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: ChecksumAddress | str,
        data: bytes = b"",
    ) -> None:
        """
        Deliver the requested outputs to `to`. If `data` is not empty, call
        `uniswap_v2_call` on the recipient before verifying the pool invariant
        """


class TokenGateway(Protocol):
    """
    Can move fungible token balances. The acting address is the sender of the current call frame.
    """

    def balance_of(self, token: ChecksumAddress | str, owner: ChecksumAddress | str) -> int: ...

    def allowance(
        self,
        token: ChecksumAddress | str,
        owner: ChecksumAddress | str,
        spender: ChecksumAddress | str,
    ) -> int: ...

    def transfer(
        self,
        token: ChecksumAddress | str,
        to: ChecksumAddress | str,
        amount: int,
    ) -> None:
        """
        Move `amount` of `token` from the caller to `to`
        """

    def transfer_from(
        self,
        token: ChecksumAddress | str,
        from_: ChecksumAddress | str,
        to: ChecksumAddress | str,
        amount: int,
    ) -> None:
        """
        Move `amount` of `token` from `from_` to `to`, spending the allowance granted to the caller
        """

    def approve(
        self,
        token: ChecksumAddress | str,
        spender: ChecksumAddress | str,
        amount: int,
    ) -> None:
        """
        Set the allowance of `spender` over the caller's `token` balance
        """


class SwapCallbackReceiver(Protocol):
    """
    Can receive the re-entrant callback issued by a pool during a swap with non-empty data.
    """

    address: ChecksumAddress

    def uniswap_v2_call(
        self,
        sender: ChecksumAddress,
        amount0_out: int,
        amount1_out: int,
        data: bytes,
    ) -> Any: ...
