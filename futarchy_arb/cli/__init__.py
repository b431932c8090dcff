"""Command line interface: Router parses, controllers act, View prints."""
