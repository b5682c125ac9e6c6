"""Resource engagement tracking."""
