"""Errors raised by the lobby and game services.

Every error is recoverable: the request that caused it is rejected with a
single ``error`` message to the requesting connection and nothing else
changes.

Hierarchy:
    GameError
        InputValidation: InvalidName, MalformedPayload, InvalidGeometry
        Conflict: NameTaken, AlreadyJoined, TargetNotFound, SelfChallenge,
                  NoSuchChallenge, NoRematchOffer
        StateViolation: NotJoined, NotInLobby, NotYourTurn, InvalidCell,
                        GameAlreadyOver, NotInGame, GameNotOver
"""


class GameError(Exception):
    """Base class for rejected requests. ``message`` is shown to the client."""

    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InputValidation(GameError):
    default_message = 'Invalid request'


class Conflict(GameError):
    default_message = 'Request conflicts with current state'


class StateViolation(GameError):
    default_message = 'Request not allowed right now'


class InvalidName(InputValidation):
    default_message = 'Username cannot be empty'


class MalformedPayload(InputValidation):
    default_message = 'Malformed request payload'


class InvalidGeometry(InputValidation):
    default_message = 'Invalid board size or win condition'


class NameTaken(Conflict):
    default_message = 'Username is already taken. Please choose another.'


class AlreadyJoined(Conflict):
    default_message = 'You have already joined'


class TargetNotFound(Conflict):
    default_message = 'Target user not found or not available'


class SelfChallenge(Conflict):
    default_message = 'You cannot challenge yourself'


class NoSuchChallenge(Conflict):
    default_message = 'Invalid challenge'


class NoRematchOffer(Conflict):
    default_message = 'No rematch has been offered'


class NotJoined(StateViolation):
    default_message = 'You must join first'


class NotInLobby(StateViolation):
    default_message = 'You must be in the lobby to do that'


class NotYourTurn(StateViolation):
    default_message = 'It is not your turn'


class InvalidCell(StateViolation):
    default_message = 'Invalid move'


class GameAlreadyOver(StateViolation):
    default_message = 'The game is already over'


class NotInGame(StateViolation):
    default_message = 'You are not in a game'


class GameNotOver(StateViolation):
    default_message = 'The game is not over yet'
