from typing import Any

from eth_typing import ChecksumAddress

from flashswap.exceptions.base import FlashSwapError


class Erc20TokenError(FlashSwapError):
    """
    Exception raised inside ERC-20 token helpers.
    """


class TransferFailure(Erc20TokenError):
    """
    Raised when a token movement cannot be completed.
    """


class InsufficientBalance(TransferFailure):
    def __init__(self, token: ChecksumAddress, owner: ChecksumAddress, balance: int, amount: int):
        self.token = token
        self.owner = owner
        self.balance = balance
        self.amount = amount
        super().__init__(
            message=f"Transfer of {amount} {token} exceeds the balance ({balance}) of {owner}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.token, self.owner, self.balance, self.amount)


class InsufficientAllowance(TransferFailure):
    def __init__(
        self,
        token: ChecksumAddress,
        owner: ChecksumAddress,
        spender: ChecksumAddress,
        allowance: int,
        amount: int,
    ):
        self.token = token
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.amount = amount
        super().__init__(
            message=f"Transfer of {amount} {token} exceeds the allowance ({allowance}) granted by "
            f"{owner} to {spender}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.token, self.owner, self.spender, self.allowance, self.amount)
