from .simulation_ledger import SimulationLedger
from .world_state import Journaled, WorldState

__all__ = (
    "Journaled",
    "SimulationLedger",
    "WorldState",
)
