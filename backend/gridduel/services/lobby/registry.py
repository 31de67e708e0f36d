from typing import Dict, List, Optional

from gridduel.errors import AlreadyJoined, InvalidName, NameTaken
from gridduel.models import PlayerIdentity, PlayerStatus, normalize_name


class SessionRegistry:
    """Maps live connections to player identities and their lobby status.

    Identities are keyed by an opaque id. Lookups for identities or
    connections that are gone return None instead of raising, since a
    disconnect may race with requests already in flight.
    """

    def __init__(self, max_name_length: int = 20):
        self.max_name_length = max_name_length
        # Insertion ordered, so lobby listings follow registration order
        self._players: Dict[str, PlayerIdentity] = {}
        self._by_connection: Dict[str, str] = {}
        self._by_name: Dict[str, str] = {}

    def register(self, connection: str, name) -> PlayerIdentity:
        if not isinstance(name, str) or not name.strip():
            raise InvalidName()
        name = name.strip()
        if len(name) > self.max_name_length:
            raise InvalidName(f'Username must be at most {self.max_name_length} characters')
        if connection in self._by_connection:
            raise AlreadyJoined()
        if normalize_name(name) in self._by_name:
            raise NameTaken()

        player = PlayerIdentity(name=name, connection=connection)
        self._players[player.id] = player
        self._by_connection[connection] = player.id
        self._by_name[player.key] = player.id
        return player

    def unregister(self, connection: str) -> Optional[PlayerIdentity]:
        player_id = self._by_connection.pop(connection, None)
        if player_id is None:
            return None
        player = self._players.pop(player_id)
        self._by_name.pop(player.key, None)
        return player

    def get(self, player_id: str) -> Optional[PlayerIdentity]:
        return self._players.get(player_id)

    def by_connection(self, connection: str) -> Optional[PlayerIdentity]:
        player_id = self._by_connection.get(connection)
        return self._players.get(player_id) if player_id else None

    def find(self, name) -> Optional[PlayerIdentity]:
        if not isinstance(name, str):
            return None
        player_id = self._by_name.get(normalize_name(name))
        return self._players.get(player_id) if player_id else None

    def is_live(self, player: PlayerIdentity) -> bool:
        return self._players.get(player.id) is player

    def list_lobby(self) -> List[str]:
        return [p.name for p in self._players.values() if p.status is PlayerStatus.LOBBY]

    def set_status(self, player: PlayerIdentity, status: PlayerStatus) -> bool:
        if not self.is_live(player):
            return False
        player.status = status
        return True

    def __len__(self):
        return len(self._players)
