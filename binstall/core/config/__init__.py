"""Configuration — release table loading and runtime settings."""
