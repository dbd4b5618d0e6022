from typing import NoReturn

from eth_abi.exceptions import DecodingError
from eth_typing import BlockIdentifier, ChecksumAddress
from web3 import Web3
from web3.exceptions import ContractLogicError

from flashswap.checksum_cache import get_checksum_address
from flashswap.exceptions.liquidity_pool import LiquidityPoolError, ReadOnlyPool
from flashswap.functions import encode_function_calldata, raw_call
from flashswap.logging import logger
from flashswap.types.abstract import AbstractLiquidityPool
from flashswap.types.aliases import Timestamp


class OnchainUniswapV2Pool(AbstractLiquidityPool):
    """
    A read-only view of a deployed Uniswap V2 pair. Reserves are fetched from the chain on every
    call to `get_reserves`, so it may be used as a reserve source for route quoting.
    """

    def __init__(
        self,
        address: ChecksumAddress | str,
        w3: Web3,
        *,
        block_identifier: BlockIdentifier | None = None,
        silent: bool = False,
    ) -> None:
        self.address = get_checksum_address(address)
        self.w3 = w3
        self.block_identifier = block_identifier

        try:
            token0, token1 = self.get_immutable_pool_values()
        except (ContractLogicError, DecodingError) as exc:  # pragma: no cover
            # Contracts differ slightly across Uniswap V2 forks, so decoding may fail.
            # Catch this here and raise as a pool-specific exception
            raise LiquidityPoolError(message="Could not decode contract data") from exc

        self.token0 = get_checksum_address(token0)
        self.token1 = get_checksum_address(token1)
        self.name = f"{self.token0}-{self.token1} ({self.__class__.__name__})"

        if not silent:  # pragma: no cover
            logger.info(self.name)

    def get_immutable_pool_values(self) -> tuple[str, str]:
        # These calls use 'latest' for block number, which is OK since the values are immutable
        (token0,) = raw_call(
            w3=self.w3,
            address=self.address,
            calldata=encode_function_calldata(
                function_prototype="token0()",
                function_arguments=None,
            ),
            return_types=["address"],
        )
        (token1,) = raw_call(
            w3=self.w3,
            address=self.address,
            calldata=encode_function_calldata(
                function_prototype="token1()",
                function_arguments=None,
            ),
            return_types=["address"],
        )
        return token0, token1

    def get_reserves(self) -> tuple[int, int, Timestamp]:
        try:
            reserves_token0, reserves_token1, block_timestamp_last = raw_call(
                w3=self.w3,
                address=self.address,
                calldata=encode_function_calldata(
                    function_prototype="getReserves()",
                    function_arguments=None,
                ),
                return_types=["uint112", "uint112", "uint32"],
                block_identifier=self.block_identifier,
            )
        except (ContractLogicError, DecodingError) as exc:
            raise LiquidityPoolError(message="Could not decode reserves") from exc
        return reserves_token0, reserves_token1, block_timestamp_last

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: ChecksumAddress | str,
        data: bytes = b"",
    ) -> NoReturn:
        raise ReadOnlyPool
