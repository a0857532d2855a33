"""Profile-derived energy calculations."""
