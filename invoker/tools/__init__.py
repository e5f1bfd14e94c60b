"""Backend tooling for the invoker package (record store)."""
