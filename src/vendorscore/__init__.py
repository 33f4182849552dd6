"""vendorscore — third-party vendor risk record keeper and scorer."""

__version__ = "0.1.0"
