"""
chainguard Core Module

Checkpoint registry, checkpoint validation, verification progress estimation
and checkpoint lookup against a chain index, plus the configuration, logging
and metrics they share.
"""

__all__ = []
