"""PVZ pickup-point management backend."""
