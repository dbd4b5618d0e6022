__all__ = (
    "FEE_DENOMINATOR",
    "FEE_NUMERATOR",
    "MAX_UINT32",
    "MAX_UINT112",
    "MAX_UINT256",
    "MIN_UINT112",
    "MIN_UINT256",
    "ZERO_ADDRESS",
)

import typing

from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


MAX_UINT32 = _max_uint(32)

MIN_UINT112 = _min_uint(112)
MAX_UINT112 = _max_uint(112)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

# Constant product pools retain 0.3% of every input, i.e. 997/1000 of the input is swapped
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000
