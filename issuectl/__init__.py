"""issuectl - manage a file-based issue store for AI-assisted workflows."""

__version__ = "0.3.0"
