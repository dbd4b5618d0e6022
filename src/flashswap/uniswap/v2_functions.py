from collections.abc import Callable, Iterable, Sequence
from fractions import Fraction

from eth_typing import ChecksumAddress

from flashswap.checksum_cache import get_checksum_address
from flashswap.constants import FEE_DENOMINATOR, FEE_NUMERATOR, ZERO_ADDRESS
from flashswap.exceptions import FlashSwapValueError
from flashswap.exceptions.arbitrage import InvalidPath
from flashswap.exceptions.liquidity_pool import (
    IdenticalAddresses,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    ZeroAddress,
)
from flashswap.types.gateways import PoolGateway

type ReserveLookup = Callable[[ChecksumAddress, ChecksumAddress], tuple[int, int]]
"""
A callable accepting a sorted token pair (token0, token1) and returning the pool-native reserves
(reserve0, reserve1) of the pool holding that pair.
"""

DEFAULT_FEE = Fraction(FEE_DENOMINATOR - FEE_NUMERATOR, FEE_DENOMINATOR)


def _check_non_negative(**amounts: int) -> None:
    for name, value in amounts.items():
        if not isinstance(value, int):
            raise FlashSwapValueError(message=f"{name} must be an integer, got {value!r}")
        if value < 0:
            raise FlashSwapValueError(message=f"{name} must be non-negative, got {value}")


def sort_tokens(
    token_a: ChecksumAddress | str,
    token_b: ChecksumAddress | str,
) -> tuple[ChecksumAddress, ChecksumAddress]:
    """
    Return the pair of tokens in canonical order, with the lower address first.
    """

    _token_a = get_checksum_address(token_a)
    _token_b = get_checksum_address(token_b)

    if _token_a == _token_b:
        raise IdenticalAddresses

    token0, token1 = sorted((_token_a, _token_b), key=lambda token: int(token, 16))
    if token0 == ZERO_ADDRESS:
        raise ZeroAddress
    return token0, token1


def constant_product_calc_exact_in(
    amount_in: int,
    reserves_in: int,
    reserves_out: int,
    fee: Fraction,
) -> int:
    """
    Calculate the amount out for an exact input from a constant product (x*y=k) invariant pool.
    """

    return (amount_in * (fee.denominator - fee.numerator) * reserves_out) // (
        reserves_in * fee.denominator + amount_in * (fee.denominator - fee.numerator)
    )


def constant_product_calc_exact_out(
    amount_out: int,
    reserves_in: int,
    reserves_out: int,
    fee: Fraction,
) -> int:
    """
    Calculate the amount in necessary for an exact output swap through a constant product (x*y=k)
    invariant pool.
    """

    return 1 + (reserves_in * amount_out * fee.denominator) // (
        (reserves_out - amount_out) * (fee.denominator - fee.numerator)
    )


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """
    Given some amount of an asset and the pool reserves, return the equivalent amount of the other
    asset at the current price, without fees or price impact.
    """

    _check_non_negative(amount_a=amount_a, reserve_a=reserve_a, reserve_b=reserve_b)

    if amount_a == 0:
        raise InsufficientAmount
    if reserve_a == 0 or reserve_b == 0:
        raise InsufficientLiquidity

    return amount_a * reserve_b // reserve_a


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Given an input amount of an asset and the pool reserves, return the maximum output amount of
    the other asset after the swap fee.

    The result is rounded down, so the pool always receives at least the value it pays out.
    """

    _check_non_negative(amount_in=amount_in, reserve_in=reserve_in, reserve_out=reserve_out)

    if amount_in == 0:
        raise InsufficientInputAmount
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity

    return constant_product_calc_exact_in(
        amount_in=amount_in,
        reserves_in=reserve_in,
        reserves_out=reserve_out,
        fee=DEFAULT_FEE,
    )


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """
    Given an output amount of an asset and the pool reserves, return the required input amount of
    the other asset after the swap fee.

    The truncated quotient is always incremented by one, so the result never under-pays the pool.
    """

    _check_non_negative(amount_out=amount_out, reserve_in=reserve_in, reserve_out=reserve_out)

    if amount_out == 0:
        raise InsufficientOutputAmount
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            message=f"Requested amount out ({amount_out}) >= pool reserves ({reserve_out})"
        )

    return constant_product_calc_exact_out(
        amount_out=amount_out,
        reserves_in=reserve_in,
        reserves_out=reserve_out,
        fee=DEFAULT_FEE,
    )


def flash_fee(principal: int) -> int:
    """
    The fee owed on top of `principal` when a flash-borrowed token is repaid in the same token.

    Paying `principal + fee` back satisfies the pool invariant because
    997 * fee >= 3 * principal. Like `get_amount_in`, the quotient is truncated and incremented
    by one.
    """

    _check_non_negative(principal=principal)

    if principal == 0:
        raise InsufficientAmount

    return principal * (FEE_DENOMINATOR - FEE_NUMERATOR) // FEE_NUMERATOR + 1


def get_reserves(
    reserve_lookup: ReserveLookup,
    token_a: ChecksumAddress | str,
    token_b: ChecksumAddress | str,
) -> tuple[int, int]:
    """
    Fetch the reserves for the pool holding `token_a` and `token_b`, ordered to match the
    arguments.
    """

    _token_a = get_checksum_address(token_a)
    token0, token1 = sort_tokens(token_a, token_b)
    reserve0, reserve1 = reserve_lookup(token0, token1)
    return (reserve0, reserve1) if _token_a == token0 else (reserve1, reserve0)


def get_amounts_out(
    amount_in: int,
    path: Sequence[ChecksumAddress | str],
    reserve_lookup: ReserveLookup,
) -> list[int]:
    """
    Perform chained `get_amount_out` calculations along a token path. The first element of the
    result is `amount_in`, the last is the final output.
    """

    if len(path) < 2:
        raise InvalidPath(message=f"Path must contain at least two tokens, got {len(path)}")

    amounts = [amount_in]
    for token_in, token_out in zip(path[:-1], path[1:], strict=True):
        reserve_in, reserve_out = get_reserves(reserve_lookup, token_in, token_out)
        amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out))
    return amounts


def get_amounts_in(
    amount_out: int,
    path: Sequence[ChecksumAddress | str],
    reserve_lookup: ReserveLookup,
) -> list[int]:
    """
    Perform chained `get_amount_in` calculations backward along a token path. The last element of
    the result is `amount_out`, the first is the input required at the start of the path.
    """

    if len(path) < 2:
        raise InvalidPath(message=f"Path must contain at least two tokens, got {len(path)}")

    amounts = [0] * len(path)
    amounts[-1] = amount_out
    for i in range(len(path) - 1, 0, -1):
        reserve_in, reserve_out = get_reserves(reserve_lookup, path[i - 1], path[i])
        amounts[i - 1] = get_amount_in(amounts[i], reserve_in, reserve_out)
    return amounts


def pool_reserve_lookup(pools: Iterable[PoolGateway]) -> ReserveLookup:
    """
    Build a reserve lookup from a collection of pool gateways. Reserves are read from the pool at
    each call, never cached.
    """

    pools_by_pair: dict[tuple[ChecksumAddress, ChecksumAddress], PoolGateway] = {
        (pool.token0, pool.token1): pool for pool in pools
    }

    def lookup(token0: ChecksumAddress, token1: ChecksumAddress) -> tuple[int, int]:
        try:
            pool = pools_by_pair[token0, token1]
        except KeyError:
            raise InvalidPath(message=f"No pool holds the pair {token0}-{token1}") from None
        reserve0, reserve1, _ = pool.get_reserves()
        return reserve0, reserve1

    return lookup
