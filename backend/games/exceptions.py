class GameError(Exception):
    """Base class for rule and flow violations surfaced to players."""


class GameNotFound(GameError):
    pass


class InvalidTransition(GameError):
    pass


class NotAParticipant(GameError):
    pass


class AlreadyJoined(GameError):
    pass


class GameFull(GameError):
    pass


class InvalidMove(GameError):
    pass


class NotYourTurn(InvalidMove):
    pass


class CellTaken(InvalidMove):
    pass


class LotteryNotReady(GameError):
    pass


class LotteryExpired(GameError):
    pass
