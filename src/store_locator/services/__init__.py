"""Service layer for the store locator."""
