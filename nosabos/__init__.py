# nosabos/__init__.py
"""
No Sabos language learning server

Skill tree content, exercise generation and grading, team progress
tracking on Firestore, and a Nostr identity layer for the No Sabos
language learning app.
"""

__version__ = "2.0.0"
