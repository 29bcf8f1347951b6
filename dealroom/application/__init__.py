"""Application layer: DTOs, ports, notifications, and document use cases."""
