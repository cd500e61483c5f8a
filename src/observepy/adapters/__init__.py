"""Adapters implementing core ports: console, sinks and the stdlib bridge."""
