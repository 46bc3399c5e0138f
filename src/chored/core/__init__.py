"""Library code used by chores and the CLI."""
