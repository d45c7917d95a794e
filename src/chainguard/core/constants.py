"""
chainguard Constants

Time units and checkpoint tuning values used by the checkpoint subsystem,
kept in one place so the progress model and configuration agree.

NOTE: The built-in checkpoint table lives in
``chainguard.core.consensus.checkpoints``; changing those entries changes
which histories a node accepts. Coordinate with the network before editing.
"""

from typing import Final

# =============================================================================
# TIME CONSTANTS (in seconds)
# =============================================================================

SECONDS_PER_DAY: Final[int] = 86400  # 60 * 60 * 24

# =============================================================================
# CHECKPOINT CONSTANTS
# =============================================================================

# Genesis block height; every checkpoint set must contain it
GENESIS_HEIGHT: Final[int] = 0

# Block hashes are 256-bit digests rendered as hex
BLOCK_HASH_HEX_LENGTH: Final[int] = 64

# How many times slower transactions after the last checkpoint are expected to
# verify. Reindexing from a fast disk with a slow CPU can reach 20; downloading
# over a slow network with a fast multicore CPU stays close to 1.
DEFAULT_SIGCHECK_VERIFICATION_FACTOR: Final[float] = 5.0

__all__ = [
    "SECONDS_PER_DAY",
    "GENESIS_HEIGHT",
    "BLOCK_HASH_HEX_LENGTH",
    "DEFAULT_SIGCHECK_VERIFICATION_FACTOR",
]
