"""Infrastructure: storage, persistence, messaging."""
