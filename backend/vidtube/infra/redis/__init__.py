"""Redis-backed session store."""
