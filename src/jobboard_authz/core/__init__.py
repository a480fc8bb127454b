"""Core services: error taxonomy and the authorization engine."""
