"""
revgate - revision and approval engine for design workflow sessions.

A finished workflow session hands over its generated artifacts; revgate
validates them, freezes them into a Revision, and walks that Revision through
a checklist-gated human approval.
"""

__version__ = "0.3.0"

from .engine import Engine

__all__ = ["Engine", "__version__"]
