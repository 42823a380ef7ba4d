"""Console simulation: seat reference strategies and play hands to the end."""

from .runner import build_table, run_simulation

__all__ = ["build_table", "run_simulation"]
