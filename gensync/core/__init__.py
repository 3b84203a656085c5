"""Core domain — models, services and use cases. No CLI concerns."""
