"""
Blockchain-specific exception hierarchy for chainguard.

Checkpoint lookups themselves never raise; these exceptions cover building the
checkpoint registry and the opt-in raising validation path.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class BlockchainError(Exception):
    """Base exception for all blockchain-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Validation Errors ====================


class ValidationError(BlockchainError):
    """Raised when blockchain data fails validation rules."""
    pass


class InvalidBlockError(ValidationError):
    """Raised when a block fails structural or consensus validation."""
    pass


class CheckpointMismatchError(InvalidBlockError):
    """Raised when a block's hash contradicts the checkpoint at its height.

    The block belongs to an alternate history and must not be connected.
    """

    def __init__(
        self,
        message: str,
        height: int,
        expected_hash: str,
        actual_hash: Any,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        details.update(
            {"height": height, "expected_hash": expected_hash, "actual_hash": str(actual_hash)}
        )
        super().__init__(message, details=details, **kwargs)
        self.height = height
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash


# ==================== Consensus Errors ====================


class ConsensusError(BlockchainError):
    """Raised when consensus rules are violated."""
    pass


class InvalidCheckpointSetError(ConsensusError):
    """Raised when checkpoint data cannot be trusted as a registry.

    Examples: missing genesis entry, unsorted or duplicate heights, malformed
    hashes, or inconsistent metadata.
    """
    pass


# ==================== Utility Functions ====================


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context: Dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, BlockchainError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    return context
