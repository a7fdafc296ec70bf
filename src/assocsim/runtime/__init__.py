"""Runtime helpers: seeded randomness and run logging."""
