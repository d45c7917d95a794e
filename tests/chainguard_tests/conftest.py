import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

# Ensure the src directory is importable before collection runs.
project_root = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(project_root / "src"))

from chainguard.core.consensus.checkpoints import (  # noqa: E402
    CheckpointMetadata,
    CheckpointRegistry,
    CheckpointSet,
    get_registry,
)
from chainguard.core.metrics import CheckpointMetrics  # noqa: E402

GENESIS_HASH = "aa" * 32
CHECKPOINT_100_HASH = "bb" * 32
UNKNOWN_HASH = "cc" * 32


@dataclass
class IndexNode:
    """Minimal chain-index node for tests."""

    height: int
    timestamp: int
    cumulative_tx_count: int
    block_hash: str


class FixedClock:
    """Callable clock returning a settable unix time."""

    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def small_registry():
    """Registry with checkpoints at heights 0 and 100, last checkpoint at ts=1000 with 50 tx."""
    return CheckpointRegistry(
        checkpoints=CheckpointSet([(0, GENESIS_HASH), (100, CHECKPOINT_100_HASH)]),
        metadata=CheckpointMetadata(
            time_last_checkpoint=1000,
            transactions_last_checkpoint=50,
            transactions_per_day=10.0,
        ),
    )


@pytest.fixture
def clock():
    return FixedClock(1000)


@pytest.fixture
def metrics():
    """Metrics bound to a private Prometheus registry."""
    return CheckpointMetrics(registry=CollectorRegistry())


@pytest.fixture
def block_index():
    """Block index holding nodes for both checkpoints plus an unrelated block."""
    nodes = [
        IndexNode(height=0, timestamp=0, cumulative_tx_count=1, block_hash=GENESIS_HASH),
        IndexNode(height=57, timestamp=500, cumulative_tx_count=20, block_hash="dd" * 32),
        IndexNode(height=100, timestamp=1000, cumulative_tx_count=50, block_hash=CHECKPOINT_100_HASH),
    ]
    return {node.block_hash: node for node in nodes}


@pytest.fixture
def fresh_registry_cache():
    """Clear the cached process-wide registry before and after a test."""
    get_registry.cache_clear()
    yield get_registry
    get_registry.cache_clear()


@pytest.fixture
def make_node():
    """Factory for chain-index nodes."""

    def _make(cumulative_tx_count, timestamp=1000, height=0, block_hash=UNKNOWN_HASH):
        return IndexNode(
            height=height,
            timestamp=timestamp,
            cumulative_tx_count=cumulative_tx_count,
            block_hash=block_hash,
        )

    return _make


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo level and handler changes made to the ``chainguard`` logger."""
    logger = logging.getLogger("chainguard")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
