"""Core services — trace persistence and output synchronization."""
