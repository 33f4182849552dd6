"""Risk scoring and portfolio aggregates."""
