"""Business operations. Each takes an explicit actor and a database session."""
