"""Command-line entrypoint for the archive updater."""
