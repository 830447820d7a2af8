"""External model providers used by the reconciliation engine."""
