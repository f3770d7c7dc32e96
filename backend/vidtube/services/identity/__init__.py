"""Account management around the principal: registration, profile, password."""
