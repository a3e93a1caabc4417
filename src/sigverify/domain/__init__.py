"""Domain types shared across the verification engine."""
