"""Map built artifact positions back to original source for error overlays."""

__version__ = "0.1.0"
