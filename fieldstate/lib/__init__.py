"""Validators, validator sets and the ambient helpers (errors, logging, settings)."""
