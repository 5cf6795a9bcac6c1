"""CLI sub-command groups, registered by ``binstall.main``."""
