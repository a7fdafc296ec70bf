"""External collaborators: the combination miner and the supervised auto-binner."""

from .rscript import RscriptCasmiBackend, parse_mine_output

__all__ = ["RscriptCasmiBackend", "parse_mine_output"]
