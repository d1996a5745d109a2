"""Domain entities and ports of the query runner."""
