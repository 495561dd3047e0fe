"""Mini Catalog: persistence core for a collectible miniature catalog."""

__version__ = "0.1.0"
