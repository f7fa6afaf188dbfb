"""OT Calc - overtime and allowance pay tracking."""

__version__ = "0.3.0"
