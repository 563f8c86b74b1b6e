"""Store locator service: geospatial store search and nearby-store links for customers."""

__version__ = "0.1.0"
