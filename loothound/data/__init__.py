"""
Stash data parsing and normalization module.

Turns provider stash payloads into typed containers and canonical items.
"""
