"""Auth module — trusted actor identity for incoming requests."""
