"""Application services (session lifecycle and identity)."""
