"""Release train state."""
