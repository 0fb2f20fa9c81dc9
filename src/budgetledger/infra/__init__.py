"""Storage infrastructure: engine/session plumbing and SQLModel stores."""
