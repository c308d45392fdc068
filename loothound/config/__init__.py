"""
Configuration module.

Default parameters, YAML overrides and validation for the snapshot
tracker.
"""
