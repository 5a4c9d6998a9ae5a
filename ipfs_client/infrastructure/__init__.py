"""Infrastructure layer - Transports and configuration."""
