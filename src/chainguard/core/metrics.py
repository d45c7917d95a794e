"""
chainguard - Checkpoint Metrics

Prometheus metrics for the checkpoint subsystem:
- Blocks rejected for contradicting a checkpoint
- Latest verification progress estimate
- Height of the last trusted checkpoint

Metrics are optional collaborators. Components accept a ``CheckpointMetrics``
instance and skip reporting when none is given.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, generate_latest


class CheckpointMetrics:
    """Metrics collector for checkpoint enforcement and sync progress."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize checkpoint metrics.

        Args:
            registry: Custom Prometheus registry (default: global registry)
        """
        self.registry = registry or REGISTRY

        self.checkpoint_mismatches = Counter(
            "chainguard_checkpoint_mismatches_total",
            "Blocks rejected because their hash contradicts a checkpoint",
            registry=self.registry,
        )

        self.verification_progress = Gauge(
            "chainguard_verification_progress",
            "Estimated fraction of chain verification completed (0-1)",
            registry=self.registry,
        )

        self.checkpoint_height = Gauge(
            "chainguard_checkpoint_height",
            "Height of the highest trusted checkpoint",
            registry=self.registry,
        )

    def record_mismatch(self) -> None:
        self.checkpoint_mismatches.inc()

    def record_progress(self, progress: float) -> None:
        self.verification_progress.set(progress)

    def set_checkpoint_height(self, height: int) -> None:
        self.checkpoint_height.set(height)

    def get_stats(self) -> Dict[str, Any]:
        """Current values of the checkpoint metrics."""
        sample = self.registry.get_sample_value
        return {
            "checkpoint_mismatches": int(sample("chainguard_checkpoint_mismatches_total") or 0),
            "verification_progress": sample("chainguard_verification_progress") or 0.0,
            "checkpoint_height": int(sample("chainguard_checkpoint_height") or 0),
        }

    def export(self) -> bytes:
        """Render metrics in Prometheus text exposition format."""
        return generate_latest(self.registry)


__all__ = ["CheckpointMetrics"]
