"""Configuration, service facade and command-line entry point."""
