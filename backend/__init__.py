"""Memory Lane HTTP backend."""
