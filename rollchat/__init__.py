"""Interactive chat client with a bounded, summarizing conversation memory."""

__version__ = "0.1.0"
