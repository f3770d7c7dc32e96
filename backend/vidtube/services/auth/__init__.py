"""Session token lifecycle: login, refresh with rotation, logout."""
