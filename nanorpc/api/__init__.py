"""HTTP surface of the RPC gateway."""
