"""tests/helpers.py: row and event builders shared by the test modules."""
from datetime import datetime, timedelta

from triple_tracker.analytics.event_detector import TripleEvent
from triple_tracker.utils.config import COL_DATE, COL_DRAW, SUIT_COLUMNS

PLAIN = ("2", "3", "4", "5")
TRIPLE = ("7", "7", "7", "K")
FIRST_DAY = datetime(2024, 1, 1)


def make_row(draw, date, suits):
    row = {COL_DATE: date, COL_DRAW: draw}
    row.update(dict(zip(SUIT_COLUMNS, suits)))
    return row


def make_table(n, triple_draws=(), quad_draws=()):
    """Draws 1..n, oldest first, one day apart from 1 Jan 2024 as D/M/YY text."""
    rows = []
    for d in range(1, n + 1):
        if d in quad_draws:
            suits = ("A", "A", "A", "A")
        elif d in triple_draws:
            suits = TRIPLE
        else:
            suits = PLAIN
        day = FIRST_DAY + timedelta(days=d - 1)
        rows.append(make_row(str(d), f"{day.day}/{day.month}/{day.strftime('%y')}", suits))
    return rows


def events_at(positions):
    return [
        TripleEvent(
            idx=p, draw=str(p + 1), draw_number=p + 1, date="", value="7", size=3,
            match_columns=tuple(SUIT_COLUMNS[:3]), missing_columns=(SUIT_COLUMNS[3],),
            suits={},
        )
        for p in positions
    ]
