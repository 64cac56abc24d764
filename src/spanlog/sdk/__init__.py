"""Package lifecycle state."""
