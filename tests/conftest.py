import logging
from collections.abc import Callable

import pytest

from flashswap.logging import logger
from flashswap.transaction import WorldState
from flashswap.uniswap import UniswapV2Pool

type PoolFactory = Callable[[str, str, str, int, int], UniswapV2Pool]


@pytest.fixture(scope="session", autouse=True)
def _set_flashswap_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def world() -> WorldState:
    return WorldState(timestamp=1_700_000_000)


@pytest.fixture
def make_pool(world: WorldState) -> PoolFactory:
    """
    Deploy a pair to the test world and fund it. The reserves are given in the same order as the
    tokens, e.g. `make_pool(address, token_a, token_b, reserve_a, reserve_b)`.
    """

    def _make_pool(
        address: str,
        token_a: str,
        token_b: str,
        reserve_a: int,
        reserve_b: int,
    ) -> UniswapV2Pool:
        pool = UniswapV2Pool(address=address, tokens=(token_a, token_b), world=world, silent=True)
        world.ledger.adjust(address=pool.address, token=token_a, amount=reserve_a)
        world.ledger.adjust(address=pool.address, token=token_b, amount=reserve_b)
        pool.sync()
        return pool

    return _make_pool
