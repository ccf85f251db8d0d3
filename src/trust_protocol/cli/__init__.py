"""Command line tooling for auditing exported trust artifacts."""
