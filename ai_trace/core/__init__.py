"""
Core modules for AI Trace.

This package contains the canonical trace model, builders, stream
merging, cross-step merging, and model metadata lookup.
"""
