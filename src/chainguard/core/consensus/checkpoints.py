"""
chainguard - Checkpoint Registry

Holds the trusted (height, block hash) pairs a node uses to:
- Reject alternate histories that diverge from known-good blocks
- Bound how much historical chain a new node must fully re-verify
- Estimate how far a verification pass has progressed

The registry is built once at startup, validated, and then shared read-only by
every consumer. Nothing mutates it afterwards, so reads need no locking.

What makes a good checkpoint block?
- Surrounded by blocks with reasonable timestamps (no earlier block with a
  later timestamp, no later block with an earlier one)
- Contains no strange transactions
"""

from __future__ import annotations

import json
import logging
import math
import operator
from bisect import bisect_left
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterable, Iterator, Mapping, Sequence

from chainguard.core.blockchain_exceptions import (
    InvalidCheckpointSetError,
    get_error_context,
)
from chainguard.core.config import Config
from chainguard.core.constants import BLOCK_HASH_HEX_LENGTH, GENESIS_HEIGHT

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdef")


def normalize_block_hash(value: Any) -> str | None:
    """
    Normalize a block hash to lowercase hex without a ``0x`` prefix.

    Byte digests are hex-encoded. Returns None for values that cannot be a
    hash at all, so comparisons against them simply fail.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    if normalized.startswith("0x"):
        normalized = normalized[2:]
    return normalized


def is_valid_block_hash(value: Any) -> bool:
    """Check that ``value`` is a 256-bit digest in normalized hex form."""
    return (
        isinstance(value, str)
        and len(value) == BLOCK_HASH_HEX_LENGTH
        and all(ch in _HEX_DIGITS for ch in value)
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_height(value: Any) -> int | None:
    """Coerce a lookup height to int; integral floats count, bools do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return operator.index(value)
    except TypeError:
        return None


@dataclass(frozen=True)
class CheckpointEntry:
    """A block hash asserted in advance to be on the canonical chain."""

    height: int
    block_hash: str

    def __post_init__(self) -> None:
        if not _is_int(self.height) or self.height < 0:
            raise InvalidCheckpointSetError(
                f"Checkpoint height must be a non-negative integer, got {self.height!r}",
                details={"height": self.height},
            )
        normalized = normalize_block_hash(self.block_hash)
        if not is_valid_block_hash(normalized):
            raise InvalidCheckpointSetError(
                f"Checkpoint at height {self.height} has malformed hash {self.block_hash!r}",
                details={"height": self.height, "block_hash": str(self.block_hash)},
            )
        object.__setattr__(self, "block_hash", normalized)

    @classmethod
    def from_raw(cls, raw: Any) -> "CheckpointEntry":
        """Build an entry from ``[height, hash]`` or ``{"height", "block_hash"}``."""
        if isinstance(raw, CheckpointEntry):
            return raw
        try:
            if isinstance(raw, Mapping):
                return cls(height=raw["height"], block_hash=raw["block_hash"])
            height, block_hash = raw
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidCheckpointSetError(
                f"Malformed checkpoint entry: {raw!r}",
                details={"entry": repr(raw)},
            ) from exc
        return cls(height=height, block_hash=block_hash)


class CheckpointSet:
    """
    Immutable, height-ordered collection of checkpoints.

    Invariants (checked on construction):
    - Non-empty and includes the genesis entry at height 0
    - Heights strictly increasing, so no two entries share a height

    Lookups by height are O(log n) via bisection over the sorted heights.
    """

    __slots__ = ("_entries", "_heights")

    def __init__(self, entries: Iterable[CheckpointEntry | Sequence[Any] | Mapping[str, Any]]):
        checkpoints = tuple(CheckpointEntry.from_raw(entry) for entry in entries)
        if not checkpoints:
            raise InvalidCheckpointSetError("Checkpoint set must not be empty")

        for previous, current in zip(checkpoints, checkpoints[1:]):
            if current.height == previous.height:
                raise InvalidCheckpointSetError(
                    f"Duplicate checkpoint height {current.height}",
                    details={"height": current.height},
                )
            if current.height < previous.height:
                raise InvalidCheckpointSetError(
                    f"Checkpoint heights must be strictly increasing: "
                    f"{current.height} follows {previous.height}",
                    details={"height": current.height, "previous_height": previous.height},
                )

        if checkpoints[0].height != GENESIS_HEIGHT:
            raise InvalidCheckpointSetError(
                f"Checkpoint set must include genesis (height {GENESIS_HEIGHT}), "
                f"lowest height is {checkpoints[0].height}",
                details={"lowest_height": checkpoints[0].height},
            )

        self._entries: tuple[CheckpointEntry, ...] = checkpoints
        self._heights: tuple[int, ...] = tuple(entry.height for entry in checkpoints)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CheckpointEntry]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[CheckpointEntry]:
        return reversed(self._entries)

    def __contains__(self, height: object) -> bool:
        return self.get(height) is not None  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckpointSet):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"CheckpointSet(count={len(self)}, heights={self._heights[0]}..{self._heights[-1]})"

    def get(self, height: int) -> str | None:
        """Return the registered hash at ``height``, or None if unregistered."""
        height = _as_height(height)
        if height is None:
            return None
        pos = bisect_left(self._heights, height)
        if pos < len(self._heights) and self._heights[pos] == height:
            return self._entries[pos].block_hash
        return None

    @property
    def highest(self) -> CheckpointEntry:
        return self._entries[-1]

    @property
    def heights(self) -> tuple[int, ...]:
        return self._heights


@dataclass(frozen=True)
class CheckpointMetadata:
    """
    Scalar facts about the last checkpoint, used by the progress model.

    Attributes:
        time_last_checkpoint: UNIX timestamp of the last checkpoint block
        transactions_last_checkpoint: Total transactions between genesis and the
            last checkpoint (inclusive). Must match the real chain; not verified.
        transactions_per_day: Estimated transactions per day after the checkpoint
    """

    time_last_checkpoint: int
    transactions_last_checkpoint: int
    transactions_per_day: float

    def __post_init__(self) -> None:
        if not _is_int(self.time_last_checkpoint) or self.time_last_checkpoint < 0:
            raise InvalidCheckpointSetError(
                f"time_last_checkpoint must be a non-negative integer, "
                f"got {self.time_last_checkpoint!r}"
            )
        if not _is_int(self.transactions_last_checkpoint) or self.transactions_last_checkpoint < 0:
            raise InvalidCheckpointSetError(
                f"transactions_last_checkpoint must be a non-negative integer, "
                f"got {self.transactions_last_checkpoint!r}"
            )
        rate = self.transactions_per_day
        if (
            isinstance(rate, bool)
            or not isinstance(rate, (int, float))
            or not math.isfinite(rate)
            or rate <= 0
        ):
            raise InvalidCheckpointSetError(
                f"transactions_per_day must be a positive finite number, got {rate!r}"
            )
        object.__setattr__(self, "transactions_per_day", float(rate))


@dataclass(frozen=True)
class CheckpointRegistry:
    """The validated checkpoint set plus metadata describing its last entry."""

    checkpoints: CheckpointSet
    metadata: CheckpointMetadata
    source: str = field(default="builtin", compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "dict") -> "CheckpointRegistry":
        """
        Build a registry from checkpoint data.

        Expected shape::

            {
                "checkpoints": [[0, "<hex>"], [100, "<hex>"]],
                "time_last_checkpoint": 1000,
                "transactions_last_checkpoint": 50,
                "transactions_per_day": 10.0
            }

        Raises:
            InvalidCheckpointSetError: if any field is missing or violates the
                registry invariants
        """
        if not isinstance(data, Mapping):
            raise InvalidCheckpointSetError(
                f"Checkpoint data must be an object, got {type(data).__name__}",
                details={"source": source},
            )
        try:
            raw_checkpoints = data["checkpoints"]
            metadata = CheckpointMetadata(
                time_last_checkpoint=data["time_last_checkpoint"],
                transactions_last_checkpoint=data["transactions_last_checkpoint"],
                transactions_per_day=data["transactions_per_day"],
            )
        except KeyError as exc:
            raise InvalidCheckpointSetError(
                f"Checkpoint data is missing field {exc.args[0]!r}",
                details={"source": source, "field": exc.args[0]},
            ) from exc
        if isinstance(raw_checkpoints, (str, bytes)) or not isinstance(raw_checkpoints, Iterable):
            raise InvalidCheckpointSetError(
                "Checkpoint data field 'checkpoints' must be a list",
                details={"source": source},
            )
        return cls(checkpoints=CheckpointSet(raw_checkpoints), metadata=metadata, source=source)

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkpoints": [[entry.height, entry.block_hash] for entry in self.checkpoints],
            "time_last_checkpoint": self.metadata.time_last_checkpoint,
            "transactions_last_checkpoint": self.metadata.transactions_last_checkpoint,
            "transactions_per_day": self.metadata.transactions_per_day,
        }

    def describe(self) -> dict[str, Any]:
        """Summarize the registry for status output and logs."""
        highest = self.checkpoints.highest
        return {
            "source": self.source,
            "total_checkpoints": len(self.checkpoints),
            "lowest_height": self.checkpoints.heights[0],
            "last_checkpoint_height": highest.height,
            "last_checkpoint_hash": highest.block_hash,
            "time_last_checkpoint": self.metadata.time_last_checkpoint,
            "transactions_last_checkpoint": self.metadata.transactions_last_checkpoint,
            "transactions_per_day": self.metadata.transactions_per_day,
        }


# ==================== BUILT-IN MAINNET DATA ====================

MAINNET_CHECKPOINTS: tuple[tuple[int, str], ...] = (
    (0, "0x563ac70cc2642286ad8463559011621fc4debe7ab2525900f74d079fc73cb5f2"),
    (9649, "0x76712bc630c81d539ca51d410784af8b0ad9034867a8a4db12e8f0f0c0f39c1c"),
    (20000, "0x2bbee592fa2f3738cad266d038f725e0d2ba7edf1b80380fa39608f523a31404"),
    (30000, "0x1c3fee4059cf4147b4e234937f8292304f92eca8d7f34338039e97937d1211f3"),
    (40000, "0x65585e9d874db1b9c4d02e5a3ffaa6275efb6c14c731f05799b0485ef1f47919"),
    (50000, "0xe25b98e32bfa15a9729e8e988021df1fea31f28e137fcc5b9ff610668aab0a9a"),
    (60000, "0xd5ec242db805d2cefb7dcca8aa2888cc20b802f4819c9a4d488a66b0032a925b"),
    (70000, "0xc34628d3939502c31b9173a452e7c2af31fe2c72d193e9bac26ce7356d0af2d7"),
    (80000, "0xb6dc848ecd9c68a86536b09e068919a87cad69bf29b2378531486941caade839"),
    (90000, "0x0ca9b832934f5afeff66bf22f48bd7c09cba227b25d33347df704c43788f01db"),
    (100000, "0x4aab6fc1a528d587a8357f62ce9ec8a84e7990b486389d352c0eb0c1652e6ded"),
    (150000, "0xb1391e2d3f10d596d715d49add86425ac5d4ec82dc3aff88bb230f0c8d5ef76f"),
    (196177, "0x71d89b625667c8f4f6b6c6a70ca68fa8143dda941f896273794e821923b0dd57"),
)

MAINNET_METADATA = CheckpointMetadata(
    time_last_checkpoint=1489231307,  # UNIX timestamp of last checkpoint block
    # total number of transactions between genesis and last checkpoint
    transactions_last_checkpoint=23062,
    transactions_per_day=576.0,  # estimated transactions per day after checkpoint
)


def load_checkpoint_file(path: str) -> CheckpointRegistry:
    """
    Load and validate checkpoint data from a JSON file.

    Args:
        path: Path to a JSON document in the ``CheckpointRegistry.from_dict`` shape

    Returns:
        Validated registry

    Raises:
        InvalidCheckpointSetError: if the file is unreadable, not JSON, or invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise InvalidCheckpointSetError(
            f"Could not read checkpoint file {path}: {exc}",
            details={"path": path},
        ) from exc

    registry = CheckpointRegistry.from_dict(data, source=path)
    logger.info(
        "Loaded %d checkpoints from %s",
        len(registry.checkpoints),
        path,
        extra={
            "event": "checkpoints.file_loaded",
            "path": path,
            "last_checkpoint_height": registry.checkpoints.highest.height,
        },
    )
    return registry


@lru_cache(maxsize=1)
def get_registry() -> CheckpointRegistry:
    """
    Return the process-wide checkpoint registry, building it on first use.

    Uses ``Config.CHECKPOINTS_FILE`` when set, otherwise the built-in mainnet
    table. The returned registry is immutable and shared by all callers.
    """
    path = Config.CHECKPOINTS_FILE
    try:
        if path:
            registry = load_checkpoint_file(path)
        else:
            registry = CheckpointRegistry(
                checkpoints=CheckpointSet(MAINNET_CHECKPOINTS),
                metadata=MAINNET_METADATA,
            )
    except InvalidCheckpointSetError as exc:
        logger.error(
            "Checkpoint registry could not be built",
            extra={"event": "checkpoints.registry_invalid", **get_error_context(exc)},
        )
        raise

    logger.info(
        "Checkpoint registry ready: %d checkpoints, last at height %d",
        len(registry.checkpoints),
        registry.checkpoints.highest.height,
        extra={"event": "checkpoints.registry_built", "source": registry.source},
    )
    return registry


__all__ = [
    "CheckpointEntry",
    "CheckpointSet",
    "CheckpointMetadata",
    "CheckpointRegistry",
    "MAINNET_CHECKPOINTS",
    "MAINNET_METADATA",
    "get_registry",
    "load_checkpoint_file",
    "normalize_block_hash",
    "is_valid_block_hash",
]
