"""Attune: reconciliation engine for two-party perspective exchanges.

Coordinates empathy attempts between the two participants of a session,
runs gap analysis on each direction and guarantees every direction
reaches a terminal state within a bounded number of analysis passes.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
