from typing import Dict, Optional

from gridduel.errors import NotInLobby, SelfChallenge, TargetNotFound
from gridduel.models import ChallengeOffer, PlayerIdentity, PlayerStatus
from gridduel.services.games import validate_geometry
from .registry import SessionRegistry


class ChallengeBroker:
    """Pending challenge offers, at most one per challenger.

    A new offer from a challenger replaces the previous one.
    """

    def __init__(self, registry: SessionRegistry, min_board_size=3, max_board_size=10, min_win_condition=3):
        self.registry = registry
        self.min_board_size = min_board_size
        self.max_board_size = max_board_size
        self.min_win_condition = min_win_condition
        self._offers: Dict[str, ChallengeOffer] = {}

    def offer(self, challenger: PlayerIdentity, target_name, board_size, win_condition) -> ChallengeOffer:
        validate_geometry(
            board_size,
            win_condition,
            min_size=self.min_board_size,
            max_size=self.max_board_size,
            min_win=self.min_win_condition,
        )
        if challenger.status is not PlayerStatus.LOBBY:
            raise NotInLobby()
        target = self.registry.find(target_name)
        if target is None or target.status is not PlayerStatus.LOBBY:
            raise TargetNotFound()
        if target.id == challenger.id:
            raise SelfChallenge()

        offer = ChallengeOffer(challenger, target, board_size, win_condition)
        self._offers[challenger.id] = offer
        return offer

    def get(self, challenger: PlayerIdentity) -> Optional[ChallengeOffer]:
        return self._offers.get(challenger.id)

    def consume(self, challenger: PlayerIdentity, target: Optional[PlayerIdentity] = None) -> Optional[ChallengeOffer]:
        """Remove and return the challenger's offer.

        When ``target`` is given the offer is only consumed if it was made to
        that player; otherwise it stays in place and None is returned.
        """
        offer = self._offers.get(challenger.id)
        if offer is None:
            return None
        if target is not None and offer.target.id != target.id:
            return None
        del self._offers[challenger.id]
        return offer

    def cancel(self, challenger: PlayerIdentity) -> None:
        self._offers.pop(challenger.id, None)

    def __len__(self):
        return len(self._offers)
