"""addonctl: addon lifecycle manager with fault isolation."""

__version__ = "0.1.0"
