"""Game domain services: win detection and move rules.

This package contains pure game logic that is driven by the match
coordinator, keeping transport concerns separated from core game mechanics.
"""

from .engine import GameEngine, MoveResult, validate_geometry
from .win_detector import detect_winner, is_board_full

__all__ = ['GameEngine', 'MoveResult', 'validate_geometry', 'detect_winner', 'is_board_full']
