"""Command-line interface (`sbe`)."""
