"""Boundary code: decoding request payloads and encoding envelopes."""
