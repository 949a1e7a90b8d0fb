"""Catalog health checks and roll simulation."""

from .checklist import ChecklistIssue, run_checklist
from .simulator import RollSimulator, SimulationResult

__all__ = ["ChecklistIssue", "RollSimulator", "SimulationResult", "run_checklist"]
