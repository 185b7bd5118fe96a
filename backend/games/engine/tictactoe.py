from ..exceptions import CellTaken, InvalidMove, NotYourTurn

X = "X"
O = "O"
DRAW = "draw"

BOARD_SIZE = 9

WINNING_PATTERNS = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
]


def new_board():
    return [None] * BOARD_SIZE


def symbol_for(player_number: int) -> str:
    return X if player_number == 1 else O


def next_player(symbol: str) -> str:
    return O if symbol == X else X


def check_winner(board):
    """
    "X" / "O" for a completed triple, "draw" for a full board,
    None while the game is still in progress.
    """
    for a, b, c in WINNING_PATTERNS:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    if all(cell is not None for cell in board):
        return DRAW
    return None


def apply_move(board, index, symbol, current_player):
    """Return a new board with symbol placed at index."""
    if len(board) != BOARD_SIZE:
        raise InvalidMove("Malformed board")
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < BOARD_SIZE:
        raise InvalidMove("Cell index must be between 0 and 8")
    if symbol != current_player:
        raise NotYourTurn("Not your turn")
    if board[index] is not None:
        raise CellTaken("Cell already taken")
    if check_winner(board) is not None:
        raise InvalidMove("Game is already decided")

    new = list(board)
    new[index] = symbol
    return new
