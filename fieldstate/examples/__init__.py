"""Example consumers of the field state API."""
