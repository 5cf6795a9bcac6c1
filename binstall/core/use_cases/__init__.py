"""Use cases — what the CLI asks the core to do."""
