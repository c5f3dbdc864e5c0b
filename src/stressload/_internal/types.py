"""Shared type aliases for StressLoad."""

from __future__ import annotations

# Dotted-quad IPv4 address returned by a resolver.
Address = str

# DNS server pool used by the round-robin resolver.
ServerPool = tuple[str, ...]
