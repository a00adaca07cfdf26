"""Small-business back-office API."""
