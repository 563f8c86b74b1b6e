"""Data access for stores and customers."""
