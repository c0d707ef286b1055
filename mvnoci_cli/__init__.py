"""Command line interface for mvnoci."""
