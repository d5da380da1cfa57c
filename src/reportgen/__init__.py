"""reportgen - LCOV tracefile ingestion into a queryable coverage model."""

__version__ = "0.1.0"
