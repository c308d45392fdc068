"""
LootHound - Stash Snapshot Tracker

A desktop companion core that captures a player's stash tabs from the game
data provider, normalizes every tab shape into a flat item list, and stores
the result as timestamped snapshots per profile.
"""

__version__ = "0.1.0"
__author__ = "LootHound Team"
