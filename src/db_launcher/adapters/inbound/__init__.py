"""Inbound adapters - the HTTP API and the command line entry point."""
