"""Building blocks for the IMAP protocol: modified UTF-7 names, sequence sets, field writing and status responses."""

__version__ = "0.1.0"
__all__ = ["seqset", "status", "utf7", "write"]