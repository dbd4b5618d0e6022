from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.logging import logger

type LedgerSnapshot = tuple[
    dict[ChecksumAddress, dict[ChecksumAddress, int]],
    dict[tuple[ChecksumAddress, ChecksumAddress, ChecksumAddress], int],
]


class SimulationLedger:
    """
    A dictionary-like class for tracking token balances and allowances across addresses.

    Token balances are organized first by the holding address, then by the token contract address.
    Allowances are keyed by (owner, token, spender).
    """

    def __init__(self) -> None:
        # Entries are recorded as a dict-of-dicts, keyed by address, then by
        # token address
        self.balances: dict[
            ChecksumAddress,  # address holding balance
            dict[
                ChecksumAddress,  # token address
                int,  # balance
            ],
        ] = {}
        self.allowances: dict[
            tuple[
                ChecksumAddress,  # owner
                ChecksumAddress,  # token address
                ChecksumAddress,  # spender
            ],
            int,
        ] = {}

    def adjust(
        self,
        address: ChecksumAddress | str,
        token: ChecksumAddress | str,
        amount: int,
    ) -> None:
        """
        Apply an adjustment to the balance for a token held by an address.

        The amount can be positive (credit) or negative (debit). The method
        checksums all addresses prior to use. No balance checks are performed here, callers moving
        value on behalf of an owner should use a token gateway.

        Parameters
        ----------
        address: str | ChecksumAddress
            The address holding the token balance.
        token: str | ChecksumAddress
            The token being held.
        amount: int
            The amount to adjust. May be negative or positive.
        """

        _token_address = get_checksum_address(token)
        _address = get_checksum_address(address)

        address_balance: dict[ChecksumAddress, int]
        try:
            address_balance = self.balances[_address]
        except KeyError:
            address_balance = {}
            self.balances[_address] = address_balance

        logger.debug(f"BALANCE: {_address} {'+' if amount > 0 else ''}{amount} {_token_address}")

        try:
            address_balance[_token_address]
        except KeyError:
            address_balance[_token_address] = 0
        finally:
            address_balance[_token_address] += amount
            if address_balance[_token_address] == 0:
                del address_balance[_token_address]
            if not address_balance:
                del self.balances[_address]

    def token_balance(
        self,
        address: ChecksumAddress | str,
        token: ChecksumAddress | str,
    ) -> int:
        """
        Get the balance for a given address and token.

        The method checksums all addresses prior to use.
        """

        _address = get_checksum_address(address)
        _token_address = get_checksum_address(token)

        address_balances: dict[ChecksumAddress, int]
        try:
            address_balances = self.balances[_address]
        except KeyError:
            address_balances = {}

        return address_balances.get(_token_address, 0)

    def transfer(
        self,
        token: ChecksumAddress | str,
        amount: int,
        from_addr: ChecksumAddress | str,
        to_addr: ChecksumAddress | str,
    ) -> None:
        """
        Transfer a balance between addresses.

        The method checksums all addresses prior to use.
        """

        _token_address = get_checksum_address(token)

        self.adjust(
            address=from_addr,
            token=_token_address,
            amount=-amount,
        )
        self.adjust(
            address=to_addr,
            token=_token_address,
            amount=amount,
        )

    def allowance(
        self,
        owner: ChecksumAddress | str,
        token: ChecksumAddress | str,
        spender: ChecksumAddress | str,
    ) -> int:
        return self.allowances.get(
            (
                get_checksum_address(owner),
                get_checksum_address(token),
                get_checksum_address(spender),
            ),
            0,
        )

    def set_allowance(
        self,
        owner: ChecksumAddress | str,
        token: ChecksumAddress | str,
        spender: ChecksumAddress | str,
        amount: int,
    ) -> None:
        key = (
            get_checksum_address(owner),
            get_checksum_address(token),
            get_checksum_address(spender),
        )
        logger.debug(f"ALLOWANCE: {key[0]} -> {key[2]} {amount} {key[1]}")
        if amount == 0:
            self.allowances.pop(key, None)
        else:
            self.allowances[key] = amount

    def snapshot(self) -> LedgerSnapshot:
        return (
            {address: balances.copy() for address, balances in self.balances.items()},
            self.allowances.copy(),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        balances, allowances = snapshot
        self.balances = {address: balances.copy() for address, balances in balances.items()}
        self.allowances = allowances.copy()
