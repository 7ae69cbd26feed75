"""Chat application layer: the turn orchestrator and its helpers."""

from .orchestrator import TurnOrchestrator, TurnRequest, TurnState

__all__ = ["TurnOrchestrator", "TurnRequest", "TurnState"]
