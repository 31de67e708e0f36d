"""Lobby services: connected players and pending challenges."""

from .challenges import ChallengeBroker
from .registry import SessionRegistry

__all__ = ['ChallengeBroker', 'SessionRegistry']
