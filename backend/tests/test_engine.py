from datetime import datetime, timedelta, timezone

import pytest

from games.engine import lottery, pokie, tictactoe
from games.exceptions import CellTaken, InvalidMove, NotYourTurn


# ---------------------------------------------------------------- tictactoe

def test_top_row_wins_for_x():
    board = ["X", "X", "X", None, None, None, None, None, None]
    assert tictactoe.check_winner(board) == "X"


def test_full_board_without_triple_is_draw():
    board = ["X", "O", "X",
             "X", "O", "O",
             "O", "X", "X"]
    assert tictactoe.check_winner(board) == tictactoe.DRAW


def test_empty_board_in_progress():
    assert tictactoe.check_winner(tictactoe.new_board()) is None


def test_diagonal_for_o():
    board = ["O", "X", "X",
             None, "O", None,
             "X", None, "O"]
    assert tictactoe.check_winner(board) == "O"


def test_apply_move_returns_new_board():
    board = tictactoe.new_board()
    new = tictactoe.apply_move(board, 4, "X", "X")
    assert new[4] == "X"
    assert board[4] is None


def test_apply_move_rejects_wrong_turn_taken_cell_and_bad_index():
    board = tictactoe.apply_move(tictactoe.new_board(), 0, "X", "X")

    with pytest.raises(NotYourTurn):
        tictactoe.apply_move(board, 1, "X", "O")
    with pytest.raises(CellTaken):
        tictactoe.apply_move(board, 0, "O", "O")
    with pytest.raises(InvalidMove):
        tictactoe.apply_move(board, 9, "O", "O")
    with pytest.raises(InvalidMove):
        tictactoe.apply_move(board, -1, "O", "O")


def test_no_move_after_decided():
    board = ["X", "X", "X", "O", "O", None, None, None, None]
    with pytest.raises(InvalidMove):
        tictactoe.apply_move(board, 5, "O", "O")


def test_player_symbols():
    assert tictactoe.symbol_for(1) == "X"
    assert tictactoe.symbol_for(2) == "O"
    assert tictactoe.next_player("X") == "O"


# ---------------------------------------------------------------- lottery

def test_flatten_tickets_orders_by_ticket_number():
    tickets = lottery.flatten_tickets([(7, [3, 1]), (9, [2])])
    assert tickets == [(1, 7), (2, 9), (3, 7)]


def test_draw_ticket_is_uniform_over_tickets(fixed_rng):
    tickets = [(1, 7), (2, 9), (3, 7)]
    assert lottery.draw_ticket(tickets, fixed_rng(index=1)) == (2, 9)
    assert lottery.draw_ticket(tickets, fixed_rng(index=2)) == (3, 7)


def test_draw_ticket_needs_tickets(fixed_rng):
    with pytest.raises(ValueError):
        lottery.draw_ticket([], fixed_rng())


def test_pot_and_draw_threshold():
    assert lottery.total_pot(50, 7) == 350
    assert not lottery.can_draw(1, 2)
    assert lottery.can_draw(2, 2)


def test_expiry_accepts_iso_strings():
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert lottery.is_expired((now - timedelta(seconds=1)).isoformat(), now)
    assert not lottery.is_expired((now + timedelta(minutes=5)).isoformat(), now)
    assert not lottery.is_expired(None, now)


def test_refund_amounts_per_ticket():
    assert lottery.refund_amounts([(1, [1, 4]), (2, [2]), (3, [])], 25) == {1: 50, 2: 25}


# ---------------------------------------------------------------- pokie

def _grid_with_top_row(symbol, filler):
    """Top row all `symbol`, the rest cycles through `filler` so nothing else lines up."""
    rows = [[symbol] * 4]
    for r in range(3):
        rows.append([filler[(r + c) % len(filler)] for c in range(4)])
    return rows


def test_single_top_row_pays_bet_times_multiplier():
    grid = _grid_with_top_row("seven", ["cherry", "lemon", "orange", "grape"])
    result = pokie.evaluate(grid, 10)

    assert [line["label"] for line in result.lines] == ["Row 1"]
    assert result.symbol == "seven"
    assert result.multiplier == pokie.MULTIPLIERS["seven"]
    assert result.payout == 10 * 10 * 1
    assert result.won


def test_no_lines_pays_nothing():
    grid = [
        ["cherry", "lemon", "orange", "grape"],
        ["lemon", "orange", "grape", "cherry"],
        ["orange", "grape", "cherry", "lemon"],
        ["lemon", "cherry", "lemon", "cherry"],
    ]
    result = pokie.evaluate(grid, 10)
    assert result.lines == []
    assert result.payout == 0
    assert not result.won


def test_dominant_symbol_can_differ_from_line_symbol():
    # one row of bells, but cherries cover more of the grid
    grid = [
        ["bell", "bell", "bell", "bell"],
        ["cherry", "cherry", "lemon", "cherry"],
        ["cherry", "lemon", "cherry", "cherry"],
        ["lemon", "cherry", "cherry", "lemon"],
    ]
    dominant = pokie.evaluate(grid, 10)
    assert dominant.symbol == "cherry"
    assert dominant.payout == 10 * 2

    per_line = pokie.evaluate(grid, 10, mode=pokie.PAYOUT_PER_LINE)
    assert per_line.payout == 10 * 15


def test_every_line_kind_is_found():
    grid = [["star"] * 4 for _ in range(4)]
    labels = [line["label"] for line in pokie.winning_lines(grid)]
    assert len(labels) == 10
    assert "Column 4" in labels
    assert "Diagonal TL-BR" in labels
    assert "Diagonal TR-BL" in labels


def test_unknown_symbol_uses_default_multiplier():
    assert pokie.multiplier_for("banana") == pokie.DEFAULT_MULTIPLIER


def test_spin_grid_shape(rng):
    grid = pokie.spin_grid(rng)
    assert len(grid) == 4
    assert all(len(row) == 4 for row in grid)
    assert all(cell in pokie.SYMBOLS for row in grid for cell in row)
