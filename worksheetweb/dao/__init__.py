"""Data-access objects — one per table."""
