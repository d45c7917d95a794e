"""
Verification Progress - estimate how far a sync/verification pass has come.

Work is counted per transaction:
- 1.0 for each transaction up to the last checkpoint (trusted replay)
- ``verification_factor`` for each transaction after it (full signature checks)

Transactions still to come after the checkpoint, or after the node when it is
already past the checkpoint, are extrapolated from wall-clock time at the
checkpoint's estimated daily transaction rate. The result is a heuristic for
status displays, not a correctness check.
"""

from __future__ import annotations

import math
import time
from typing import Callable

from chainguard.core.config import Config
from chainguard.core.constants import SECONDS_PER_DAY
from chainguard.core.consensus.checkpoints import CheckpointRegistry, get_registry
from chainguard.core.metrics import CheckpointMetrics
from chainguard.core.protocols import ChainIndexNode


class VerificationProgressEstimator:
    """Piecewise work model anchored at the registry's last checkpoint."""

    def __init__(
        self,
        registry: CheckpointRegistry | None = None,
        clock: Callable[[], float] | None = None,
        verification_factor: float | None = None,
        metrics: CheckpointMetrics | None = None,
    ):
        """
        Args:
            registry: Checkpoint registry (default: process-wide registry)
            clock: Returns current unix time in seconds (default: ``time.time``)
            verification_factor: Cost of a fully verified transaction relative
                to a checkpoint-trusted one (default: ``Config.SIGCHECK_VERIFICATION_FACTOR``)
            metrics: Optional metrics collector for the latest estimate
        """
        self.registry = registry if registry is not None else get_registry()
        self.clock = clock or time.time
        factor = (
            Config.SIGCHECK_VERIFICATION_FACTOR
            if verification_factor is None
            else float(verification_factor)
        )
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"verification_factor must be positive and finite, got {factor!r}")
        self.verification_factor = factor
        self.metrics = metrics

    def _transactions_since(self, now: float, since: float) -> float:
        # A clock behind the reference point means nothing left to estimate
        elapsed_days = max(0.0, now - since) / SECONDS_PER_DAY
        return elapsed_days * self.registry.metadata.transactions_per_day

    def guess_verification_progress(self, node: ChainIndexNode | None) -> float:
        """
        Guess how far verification has progressed at ``node``.

        Args:
            node: Chain-index node reached so far, or None

        Returns:
            Fraction of total expected work done, in [0.0, 1.0]. 0.0 for a
            missing node or when no work is expected at all.
        """
        if node is None:
            return 0.0

        now = self.clock()
        metadata = self.registry.metadata
        factor = self.verification_factor
        tx_last = metadata.transactions_last_checkpoint
        chain_tx = node.cumulative_tx_count

        if chain_tx <= tx_last:
            cheap_before = chain_tx
            cheap_after = tx_last - chain_tx
            expensive_after = self._transactions_since(now, metadata.time_last_checkpoint)
            work_before = float(cheap_before)
            work_after = cheap_after + expensive_after * factor
        else:
            cheap_before = tx_last
            expensive_before = chain_tx - tx_last
            expensive_after = self._transactions_since(now, node.timestamp)
            work_before = cheap_before + expensive_before * factor
            work_after = expensive_after * factor

        total_work = work_before + work_after
        if total_work <= 0:
            progress = 0.0
        else:
            progress = min(1.0, max(0.0, work_before / total_work))

        if self.metrics is not None:
            self.metrics.record_progress(progress)
        return progress


__all__ = ["VerificationProgressEstimator"]
