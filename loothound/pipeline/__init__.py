"""
Snapshot aggregation pipeline.
"""
