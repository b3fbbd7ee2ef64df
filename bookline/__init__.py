"""
Bookline - Opening Line Drill Engine

A rules-light engine for drilling pre-authored opening lines.
The learner plays one side of a book line while the engine answers
from a weighted branching script. The engine provides:
- Opening tree loading and validation
- Weighted reply selection
- A turn-based drill session state machine
- Session orchestration for UIs (REST API, CLI)
"""

__version__ = "0.1.0"
