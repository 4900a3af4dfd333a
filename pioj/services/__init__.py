"""Integrations with the external stores used by the service."""
