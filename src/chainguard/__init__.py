"""
chainguard - Checkpoint-assisted chain validation

Trusted (height, block hash) checkpoints for a blockchain node:
- Reject alternate histories that diverge from known-good blocks
- Bound how much historical chain a new node must fully re-verify
- Estimate how far a verification/sync pass has progressed

Main entry point: ``chainguard.core.checkpoints.Checkpoints``.
"""

__version__ = "0.1.0"
__author__ = "chainguard Development Team"

__all__ = []
