"""Resource synthesis: service model in, platform objects out."""
