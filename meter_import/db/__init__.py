"""PostgreSQL persistence of imported entities."""
