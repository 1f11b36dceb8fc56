"""Domain types for USD conversion quotes.

The quote document is kept as the plain JSON object returned by the remote
API so that stores can persist it verbatim.
"""

__all__ = [
    "quotes",
]
