from collections import Counter
from dataclasses import dataclass, field
from typing import List

GRID_SIZE = 4

SYMBOLS = ["cherry", "lemon", "orange", "grape", "diamond", "star", "seven", "bell"]

MULTIPLIERS = {
    "cherry": 2,
    "lemon": 2,
    "orange": 3,
    "grape": 3,
    "diamond": 5,
    "star": 7,
    "seven": 10,
    "bell": 15,
}
DEFAULT_MULTIPLIER = 2

PAYOUT_DOMINANT = "dominant"
PAYOUT_PER_LINE = "per_line"


@dataclass
class SpinResult:
    grid: List[List[str]]
    lines: List[dict] = field(default_factory=list)
    symbol: str = None
    multiplier: int = 0
    payout: int = 0

    @property
    def won(self):
        return bool(self.lines)


def multiplier_for(symbol):
    return MULTIPLIERS.get(symbol, DEFAULT_MULTIPLIER)


def spin_grid(rng, size=GRID_SIZE):
    return [[rng.choice(SYMBOLS) for _ in range(size)] for _ in range(size)]


def winning_lines(grid):
    """Every full row, column and diagonal made of one symbol."""
    size = len(grid)
    lines = []

    for i, row in enumerate(grid):
        if all(cell == row[0] for cell in row):
            lines.append({"label": f"Row {i + 1}", "symbol": row[0]})

    for j in range(size):
        column = [grid[i][j] for i in range(size)]
        if all(cell == column[0] for cell in column):
            lines.append({"label": f"Column {j + 1}", "symbol": column[0]})

    diagonal = [grid[i][i] for i in range(size)]
    if all(cell == diagonal[0] for cell in diagonal):
        lines.append({"label": "Diagonal TL-BR", "symbol": diagonal[0]})

    anti_diagonal = [grid[i][size - 1 - i] for i in range(size)]
    if all(cell == anti_diagonal[0] for cell in anti_diagonal):
        lines.append({"label": "Diagonal TR-BL", "symbol": anti_diagonal[0]})

    return lines


def dominant_symbol(grid):
    """
    Most frequent symbol on the whole grid.
    Ties go to the symbol that first appears later in row-major order.
    """
    counts = Counter(cell for row in grid for cell in row)
    best = None
    for symbol in counts:
        if best is None or not counts[best] > counts[symbol]:
            best = symbol
    return best


def evaluate(grid, bet_amount: int, mode=PAYOUT_DOMINANT) -> SpinResult:
    """
    Score a finished grid.

    In dominant mode every matched line pays the dominant symbol's
    multiplier, which is not necessarily the symbol on the winning line.
    """
    lines = winning_lines(grid)
    result = SpinResult(grid=grid, lines=lines)
    if not lines:
        return result

    if mode == PAYOUT_PER_LINE:
        result.multiplier = sum(multiplier_for(line["symbol"]) for line in lines)
        result.symbol = lines[0]["symbol"]
    else:
        result.symbol = dominant_symbol(grid)
        result.multiplier = multiplier_for(result.symbol) * len(lines)

    result.payout = bet_amount * result.multiplier
    return result
