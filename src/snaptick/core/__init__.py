"""
Core: the view-model (event reducer), daily rollover, in-memory state,
events, ports and live-value plumbing.
"""
