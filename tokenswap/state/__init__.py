"""
Binary state layouts (pool record, account snapshots) and pool storage.
"""
