"""
FounderStack - Source Package

A local-first portfolio tracker for entrepreneurs who run several companies.
It records companies, their logins, subscriptions, cards, loans, banks and
documents, and keeps everything in a single local state blob.

DESIGN PRINCIPLES:
1. One immutable snapshot, replaced on every mutation
2. Cross-collection consistency is enforced by the store, not the UI
3. Invalid intents are ignored, never half-applied
4. Persistence and AI suggestions never block the user
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FounderStack Team"
