"""
Checkpoint Scanner - locate the deepest checkpoint present in a block index.

Chain validation resumes deep verification from the newest checkpoint the
local index actually contains, skipping already-trusted history.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping, TypeVar

from chainguard.core.config import Config
from chainguard.core.consensus.checkpoints import (
    CheckpointRegistry,
    get_registry,
    normalize_block_hash,
)

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT")


def _index_keys_by_hash(block_index: Mapping[Any, Any]) -> dict[str, Hashable]:
    """Map each normalized hash in ``block_index`` to the caller's own key."""
    keys: dict[str, Hashable] = {}
    for key in block_index:
        normalized = normalize_block_hash(key)
        if normalized is not None:
            keys.setdefault(normalized, key)
    return keys


class CheckpointScanner:
    """Finds the highest checkpoint whose hash is known to a chain index."""

    def __init__(
        self,
        registry: CheckpointRegistry | None = None,
        enabled: bool | None = None,
    ):
        self.registry = registry if registry is not None else get_registry()
        self.enabled = Config.CHECKPOINTS_ENABLED if enabled is None else bool(enabled)

    def get_last_checkpoint(self, block_index: Mapping[Any, NodeT]) -> NodeT | None:
        """
        Return the index node for the highest checkpoint present in ``block_index``.

        Args:
            block_index: Block hash to chain-index node mapping, owned by the
                caller. Keys may be hex strings (any case, optional ``0x``)
                or raw 32-byte digests, as accepted by ``check_block``.

        Returns:
            The matching node, or None when checkpoints are disabled or no
            checkpoint hash is in the index
        """
        if not self.enabled:
            return None

        keys = _index_keys_by_hash(block_index)
        for entry in reversed(self.registry.checkpoints):
            if entry.block_hash in keys:
                logger.debug(
                    "Last checkpoint in index at height %d",
                    entry.height,
                    extra={"event": "checkpoints.last_checkpoint_found", "height": entry.height},
                )
                return block_index[keys[entry.block_hash]]

        logger.debug(
            "No checkpoint hash present in block index",
            extra={"event": "checkpoints.no_checkpoint_in_index", "index_size": len(block_index)},
        )
        return None


__all__ = ["CheckpointScanner"]
