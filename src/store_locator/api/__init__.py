"""HTTP surface of the store locator."""
