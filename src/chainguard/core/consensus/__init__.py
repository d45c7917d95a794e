"""Consensus rules backed by the checkpoint registry."""
