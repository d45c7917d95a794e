"""
Checkpoint Validator - rejects blocks that contradict known-good history.

A block at a checkpointed height must carry exactly the registered hash.
Heights without a checkpoint are not judged here; full block validation
happens elsewhere.
"""

from __future__ import annotations

import logging
from typing import Any

from chainguard.core.blockchain_exceptions import CheckpointMismatchError
from chainguard.core.config import Config
from chainguard.core.consensus.checkpoints import (
    CheckpointRegistry,
    get_registry,
    normalize_block_hash,
)
from chainguard.core.metrics import CheckpointMetrics

logger = logging.getLogger(__name__)


class CheckpointValidator:
    """Answers whether a (height, hash) pair is consistent with the checkpoints."""

    def __init__(
        self,
        registry: CheckpointRegistry | None = None,
        enabled: bool | None = None,
        metrics: CheckpointMetrics | None = None,
    ):
        """
        Args:
            registry: Checkpoint registry (default: process-wide registry)
            enabled: Enforce checkpoints (default: ``Config.CHECKPOINTS_ENABLED``)
            metrics: Optional metrics collector for rejected blocks
        """
        self.registry = registry if registry is not None else get_registry()
        self.enabled = Config.CHECKPOINTS_ENABLED if enabled is None else bool(enabled)
        self.metrics = metrics

    def check_block(self, height: int, block_hash: Any) -> bool:
        """
        Check a block against the checkpoint at its height.

        Returns:
            False only when a checkpoint exists at ``height`` and its hash
            differs from ``block_hash``. True when checkpoints are disabled or
            the height is not checkpointed.
        """
        if not self.enabled:
            return True

        expected = self.registry.checkpoints.get(height)
        if expected is None:
            return True

        if normalize_block_hash(block_hash) == expected:
            return True

        logger.warning(
            "Block at height %s contradicts checkpoint",
            height,
            extra={
                "event": "checkpoints.mismatch",
                "height": height,
                "expected_hash": expected,
                "actual_hash": str(block_hash),
            },
        )
        if self.metrics is not None:
            self.metrics.record_mismatch()
        return False

    def validate_block(self, height: int, block_hash: Any) -> None:
        """
        Raising variant of ``check_block``.

        Raises:
            CheckpointMismatchError: if the block contradicts a checkpoint
        """
        if self.check_block(height, block_hash):
            return
        expected = self.registry.checkpoints.get(height)
        raise CheckpointMismatchError(
            f"Block hash at height {height} does not match checkpoint {expected}",
            height=height,
            expected_hash=expected,
            actual_hash=block_hash,
        )

    def get_total_blocks_estimate(self) -> int:
        """Height of the highest checkpoint, or 0 when checkpoints are disabled."""
        if not self.enabled:
            return 0
        return self.registry.checkpoints.highest.height


__all__ = ["CheckpointValidator"]
