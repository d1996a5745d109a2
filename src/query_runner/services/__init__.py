"""Core services: statement building, result normalization and execution."""
