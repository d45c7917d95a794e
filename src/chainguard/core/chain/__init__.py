"""Chain-index helpers: verification progress and checkpoint lookup."""
