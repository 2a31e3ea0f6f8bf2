"""Transport-independent reconciliation domain."""
