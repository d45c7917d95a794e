"""
chainguard - Checkpoints

Single entry point for chain-sync and validation code. Wires the checkpoint
validator, progress estimator and chain scanner to one registry and one set of
settings:

    checkpoints = Checkpoints()
    if not checkpoints.check_block(height, block_hash):
        ...  # reject the alternate history
    progress = checkpoints.guess_verification_progress(tip)
    resume_from = checkpoints.get_last_checkpoint(block_index)

All operations are total: they return a value for every input and never raise.
``validate_block`` is the exception-raising alternative to ``check_block``.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from chainguard.core.chain.checkpoint_scanner import CheckpointScanner
from chainguard.core.chain.verification_progress import VerificationProgressEstimator
from chainguard.core.config import Config
from chainguard.core.consensus.checkpoint_validator import CheckpointValidator
from chainguard.core.consensus.checkpoints import CheckpointRegistry, get_registry
from chainguard.core.logging_config import configure_logging
from chainguard.core.metrics import CheckpointMetrics
from chainguard.core.protocols import ChainIndexNode

NodeT = TypeVar("NodeT")


class Checkpoints:
    """Checkpoint enforcement, progress estimation and resume-point lookup."""

    def __init__(
        self,
        registry: CheckpointRegistry | None = None,
        enabled: bool | None = None,
        clock: Callable[[], float] | None = None,
        verification_factor: float | None = None,
        metrics: CheckpointMetrics | None = None,
    ):
        """
        Args:
            registry: Checkpoint registry (default: process-wide registry)
            enabled: Enforce checkpoints (default: ``Config.CHECKPOINTS_ENABLED``)
            clock: Returns current unix time in seconds (default: ``time.time``)
            verification_factor: Full-verification cost multiplier
                (default: ``Config.SIGCHECK_VERIFICATION_FACTOR``)
            metrics: Optional Prometheus metrics collector
        """
        self.registry = registry if registry is not None else get_registry()
        self.enabled = Config.CHECKPOINTS_ENABLED if enabled is None else bool(enabled)
        self.metrics = metrics

        self.validator = CheckpointValidator(self.registry, enabled=self.enabled, metrics=metrics)
        self.estimator = VerificationProgressEstimator(
            self.registry,
            clock=clock,
            verification_factor=verification_factor,
            metrics=metrics,
        )
        self.scanner = CheckpointScanner(self.registry, enabled=self.enabled)

        if metrics is not None:
            metrics.set_checkpoint_height(self.get_total_blocks_estimate())

    @classmethod
    def from_config(
        cls,
        config: Any = Config,
        registry: CheckpointRegistry | None = None,
        metrics: CheckpointMetrics | None = None,
    ) -> "Checkpoints":
        """
        Build from a config object exposing ``CHECKPOINTS_ENABLED`` and
        ``SIGCHECK_VERIFICATION_FACTOR``.

        ``LOG_LEVEL`` and ``LOG_FILE`` on the same object are applied to the
        ``chainguard`` logger.
        """
        configure_logging(config)
        return cls(
            registry=registry,
            enabled=getattr(config, "CHECKPOINTS_ENABLED", True),
            verification_factor=getattr(config, "SIGCHECK_VERIFICATION_FACTOR", None),
            metrics=metrics,
        )

    def check_block(self, height: int, block_hash: Any) -> bool:
        return self.validator.check_block(height, block_hash)

    def validate_block(self, height: int, block_hash: Any) -> None:
        self.validator.validate_block(height, block_hash)

    def get_total_blocks_estimate(self) -> int:
        return self.validator.get_total_blocks_estimate()

    def guess_verification_progress(self, node: ChainIndexNode | None) -> float:
        return self.estimator.guess_verification_progress(node)

    def get_last_checkpoint(self, block_index: Mapping[Any, NodeT]) -> NodeT | None:
        return self.scanner.get_last_checkpoint(block_index)

    def get_checkpoint_info(self) -> dict[str, Any]:
        """
        Get information about the checkpoint system.

        Returns:
            Dictionary with registry summary and active settings
        """
        info = self.registry.describe()
        info.update(
            {
                "enabled": self.enabled,
                "total_blocks_estimate": self.get_total_blocks_estimate(),
                "verification_factor": self.estimator.verification_factor,
                "available_checkpoints": list(self.registry.checkpoints.heights),
            }
        )
        return info


__all__ = ["Checkpoints"]
