import dataclasses

from flashswap.types.abstract import AbstractPoolState, AbstractSimulationResult
from flashswap.types.aliases import Timestamp


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class UniswapV2PoolState(AbstractPoolState):
    reserves_token0: int
    reserves_token1: int
    block_timestamp_last: Timestamp = 0

    def __post_init__(self) -> None:
        # Reserves are uninitialized together or funded together
        assert (self.reserves_token0 == 0) == (self.reserves_token1 == 0), (
            f"Inconsistent reserves ({self.reserves_token0}, {self.reserves_token1})"
        )


@dataclasses.dataclass(slots=True, frozen=True)
class UniswapV2PoolSimulationResult(AbstractSimulationResult):
    amount0_delta: int
    amount1_delta: int
    initial_state: UniswapV2PoolState
    final_state: UniswapV2PoolState

