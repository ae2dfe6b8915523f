"""Member query construction and data access."""
