"""Payment provider API tools."""
