"""SportBook: venue slot booking backend."""
