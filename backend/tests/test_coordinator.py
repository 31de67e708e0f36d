import pytest

from gridduel.errors import (
    GameAlreadyOver,
    GameNotOver,
    NameTaken,
    NoRematchOffer,
    NoSuchChallenge,
    NotInGame,
    NotYourTurn,
    TargetNotFound,
)
from gridduel.models import PlayerStatus


@pytest.fixture()
def trio(coordinator):
    ann = coordinator.join('sid-ann', 'Ann')
    bob = coordinator.join('sid-bob', 'Bob')
    cy = coordinator.join('sid-cy', 'Cy')
    coordinator.publisher.clear()
    return ann, bob, cy


def start_game(coordinator, challenger, target, size=3, win=3):
    coordinator.challenge(challenger, target.name, size, win)
    return coordinator.accept_challenge(target, challenger.name)


def win_for_player1(coordinator, p1, p2):
    for player, cell in [(p1, 0), (p2, 3), (p1, 1), (p2, 4), (p1, 2)]:
        result = coordinator.move(player, cell)
    return result


def test_join_announces_and_broadcasts(coordinator, publisher):
    coordinator.join('sid-1', 'Ann')
    assert publisher.events_for('sid-1') == [('join_success', {'name': 'Ann'})]
    assert publisher.broadcasts[-1] == ('user_list', {'users': ['Ann']})
    with pytest.raises(NameTaken):
        coordinator.join('sid-2', 'ann')
    assert publisher.broadcasts[-1] == ('user_list', {'users': ['Ann']})


def test_challenge_notifies_target_only(coordinator, publisher, trio):
    ann, bob, _ = trio
    coordinator.challenge(ann, 'bob', 5, 4)
    assert publisher.sent == [
        ('sid-bob', 'challenge_received', {'challenger': 'Ann', 'boardSize': 5, 'winCondition': 4}),
    ]
    assert ann.status is PlayerStatus.LOBBY
    assert bob.status is PlayerStatus.LOBBY


def test_accept_creates_game(coordinator, publisher, trio):
    ann, bob, _ = trio
    session = start_game(coordinator, ann, bob, 4, 3)
    assert session.player1 is ann and session.player2 is bob
    assert ann.status is PlayerStatus.IN_GAME and bob.status is PlayerStatus.IN_GAME
    assert coordinator.broker.get(ann) is None
    expected = {
        'gameId': session.id,
        'player1': 'Ann',
        'player2': 'Bob',
        'board': [None] * 16,
        'currentTurn': 'Ann',
        'boardSize': 4,
        'winCondition': 3,
    }
    assert ('game_start', expected) in publisher.events_for('sid-ann')
    assert ('game_start', expected) in publisher.events_for('sid-bob')
    assert publisher.broadcasts[-1] == ('user_list', {'users': ['Cy']})


def test_accept_without_offer(coordinator, trio):
    ann, bob, cy = trio
    with pytest.raises(NoSuchChallenge):
        coordinator.accept_challenge(bob, 'Ann')
    coordinator.challenge(ann, 'Cy', 3, 3)
    with pytest.raises(NoSuchChallenge):
        coordinator.accept_challenge(bob, 'Ann')
    # The offer to Cy survives Bob's bogus accept
    assert coordinator.broker.get(ann).target is cy


def test_first_accepted_wins(coordinator, trio):
    ann, bob, cy = trio
    coordinator.challenge(ann, 'Cy', 3, 3)
    coordinator.challenge(bob, 'Cy', 3, 3)
    coordinator.accept_challenge(cy, 'Ann')
    with pytest.raises(NoSuchChallenge):
        coordinator.accept_challenge(cy, 'Bob')
    assert coordinator.game_for(bob) is None
    assert bob.status is PlayerStatus.LOBBY


def test_own_offer_is_dropped_when_game_starts(coordinator, trio):
    ann, bob, cy = trio
    coordinator.challenge(ann, 'Bob', 3, 3)
    coordinator.challenge(cy, 'Ann', 3, 3)
    coordinator.accept_challenge(ann, 'Cy')
    with pytest.raises(NoSuchChallenge):
        coordinator.accept_challenge(bob, 'Ann')
    assert coordinator.game_for(ann).player1 is cy


def test_decline(coordinator, publisher, trio):
    ann, bob, _ = trio
    coordinator.challenge(ann, 'Bob', 3, 3)
    publisher.clear()
    coordinator.decline_challenge(bob, 'ann')
    assert publisher.sent == [('sid-ann', 'challenge_declined', {'target': 'Bob'})]
    with pytest.raises(NoSuchChallenge):
        coordinator.decline_challenge(bob, 'Ann')


def test_move_broadcasts_update_then_game_over(coordinator, publisher, trio):
    ann, bob, _ = trio
    start_game(coordinator, ann, bob)
    publisher.clear()
    coordinator.move(ann, 4)
    update = ('game_update', {'board': [None] * 4 + ['X'] + [None] * 4, 'currentTurn': 'Bob'})
    assert publisher.events_for('sid-ann') == [update]
    assert publisher.events_for('sid-bob') == [update]

    coordinator.move(bob, 0)
    for player, cell in [(ann, 3), (bob, 1), (ann, 5)]:
        coordinator.move(player, cell)
    over = publisher.events_for('sid-bob')[-1]
    assert over == ('game_over', {
        'winner': 'X',
        'isDraw': False,
        'board': ['O', 'O', None, 'X', 'X', 'X', None, None, None],
    })
    assert publisher.events_for('sid-ann')[-1] == over


def test_move_rules(coordinator, trio):
    ann, bob, cy = trio
    with pytest.raises(NotInGame):
        coordinator.move(ann, 0)
    start_game(coordinator, ann, bob)
    with pytest.raises(NotYourTurn):
        coordinator.move(bob, 0)
    win_for_player1(coordinator, ann, bob)
    with pytest.raises(GameAlreadyOver):
        coordinator.move(bob, 8)


def test_rematch_flow(coordinator, publisher, trio):
    ann, bob, _ = trio
    old = start_game(coordinator, ann, bob, 4, 3)
    with pytest.raises(GameNotOver):
        coordinator.offer_rematch(bob)
    win_for_player1(coordinator, ann, bob)

    with pytest.raises(NoRematchOffer):
        coordinator.accept_rematch(ann, 'Bob')
    publisher.clear()
    coordinator.offer_rematch(bob)
    assert publisher.sent == [('sid-ann', 'rematch_offered', {'challenger': 'Bob'})]
    with pytest.raises(NoRematchOffer):
        coordinator.accept_rematch(bob, 'Bob')
    with pytest.raises(NoRematchOffer):
        coordinator.accept_rematch(ann, 'Cy')

    new = coordinator.accept_rematch(ann, 'bob')
    assert new.id != old.id
    assert coordinator.get_game(old.id) is None
    assert coordinator.game_for(ann) is new and coordinator.game_for(bob) is new
    assert new.player1 is ann and new.player2 is bob
    assert (new.board_size, new.win_condition) == (4, 3)
    assert new.current_turn is ann
    assert not new.rematch.offered
    assert ann.status is PlayerStatus.IN_GAME


def test_offer_rematch_outside_game(coordinator, trio):
    with pytest.raises(NotInGame):
        coordinator.offer_rematch(trio[0])


def test_return_to_lobby_tears_down(coordinator, publisher, trio):
    ann, bob, cy = trio
    session = start_game(coordinator, ann, bob)
    publisher.clear()
    coordinator.return_to_lobby(bob)
    assert publisher.sent == [('sid-ann', 'opponent_left', {})]
    assert ann.status is PlayerStatus.LOBBY and bob.status is PlayerStatus.LOBBY
    assert coordinator.get_game(session.id) is None
    assert publisher.broadcasts[-1] == ('user_list', {'users': ['Ann', 'Bob', 'Cy']})
    with pytest.raises(NotInGame):
        coordinator.move(ann, 0)


def test_return_to_lobby_without_game(coordinator, publisher, trio):
    coordinator.return_to_lobby(trio[2])
    assert publisher.sent == []
    assert publisher.broadcasts == [('user_list', {'users': ['Ann', 'Bob', 'Cy']})]


def test_disconnect_mid_game(coordinator, publisher, trio):
    ann, bob, cy = trio
    session = start_game(coordinator, ann, bob)
    coordinator.move(ann, 0)
    publisher.clear()
    coordinator.disconnect('sid-ann')
    assert publisher.sent == [('sid-bob', 'opponent_disconnected', {})]
    assert bob.status is PlayerStatus.LOBBY
    assert coordinator.get_game(session.id) is None
    assert coordinator.registry.find('Ann') is None
    assert publisher.broadcasts[-1] == ('user_list', {'users': ['Bob', 'Cy']})
    with pytest.raises(NotInGame):
        coordinator.move(bob, 1)


def test_disconnect_clears_authored_offer(coordinator, trio):
    ann, bob, _ = trio
    coordinator.challenge(ann, 'Bob', 3, 3)
    coordinator.disconnect('sid-ann')
    assert len(coordinator.broker) == 0
    with pytest.raises(NoSuchChallenge):
        coordinator.accept_challenge(bob, 'Ann')


def test_disconnect_is_idempotent(coordinator, publisher, trio):
    coordinator.disconnect('sid-cy')
    publisher.clear()
    assert coordinator.disconnect('sid-cy') is None
    assert coordinator.disconnect('never-joined') is None
    assert publisher.sent == [] and publisher.broadcasts == []


def test_challenge_to_player_in_game(coordinator, trio):
    ann, bob, cy = trio
    start_game(coordinator, ann, bob)
    with pytest.raises(TargetNotFound):
        coordinator.challenge(cy, 'Ann', 3, 3)
