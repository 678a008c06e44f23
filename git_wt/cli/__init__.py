"""Command-line interface for git-wt."""
