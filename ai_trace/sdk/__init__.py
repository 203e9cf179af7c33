"""
SDK for AI Trace.

Provides traced wrappers around provider clients.
"""

from .openai_client import TracedOpenAI

__all__ = ["TracedOpenAI"]
