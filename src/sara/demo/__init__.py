"""Demo mode: personas, sessions, seeded Saraville data and map views."""
