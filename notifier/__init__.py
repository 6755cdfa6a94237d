"""Multi-channel notification fan-out service."""
