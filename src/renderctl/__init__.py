"""renderctl - deploy and monitor services on Render."""

__version__ = "0.1.0"
