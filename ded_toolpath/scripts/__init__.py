"""Command-line entrypoints (ded-generate, ded-inspect)."""
