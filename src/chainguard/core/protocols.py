"""
chainguard - Core Protocol Interfaces

Structural interfaces for objects owned by the caller's chain index. The
checkpoint subsystem only reads these attributes; it never creates, stores or
mutates chain-index nodes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChainIndexNode(Protocol):
    """
    Read-only view of a chain-index entry.

    Attributes:
        height: Block height (genesis is 0)
        timestamp: Block timestamp in unix seconds
        cumulative_tx_count: Transactions from genesis up to and including this block
        block_hash: Block hash as hex

    Thread Safety: Owned and synchronized by the chain index. Callers must
    keep the node alive for the duration of a checkpoint call.
    """

    height: int
    timestamp: int
    cumulative_tx_count: int
    block_hash: str


__all__ = ["ChainIndexNode"]
