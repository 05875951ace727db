"""Intermediate representation of the service model."""
