"""
Provider adapters for AI Trace.

Each provider package normalizes its wire formats into the canonical
trace model.
"""
