"""SQLAlchemy-backed session store and principal directory."""
