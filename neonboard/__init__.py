"""
Neon Board - Game-state transition engine for lock-step multiplayer games.

One authoritative process (the board) owns the shared game document.
Participants queue actions; the board applies them through the engine:
- Phase graph derivation from a declarative config
- Move validation and reducer dispatch per phase
- Turn and phase advancement with lifecycle hooks
- Batch application of queued actions as a single write
"""

__version__ = "0.1.0"
