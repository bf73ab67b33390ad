from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .container import ReorderableContainer
from .errors import InvalidArgument, NotFound
from .models import Board, Card, Column

logger = logging.getLogger(__name__)


def _are_neighbours(container: ReorderableContainer, after: Any, before: Any, item: Any) -> bool:
    rest = [e for e in container if e is not item]
    for left, right in zip(rest, rest[1:]):
        if left is after:
            return right is before
    return False


def place(
    container: ReorderableContainer,
    item: Any,
    before: Optional[Any] = None,
    after: Optional[Any] = None,
) -> None:
    """Put ``item`` right after ``after`` and/or right before ``before``.

    With both anchors they must be neighbours once ``item`` is set aside.
    With neither anchor the item goes last.
    """
    if after is not None and before is not None:
        if after is not before and not _are_neighbours(container, after, before, item):
            raise InvalidArgument("the before and after anchors must be neighbours")
        container.put_between(after, before, item)
    elif after is not None:
        container.put_next_to(after, item, after=True)
    elif before is not None:
        container.put_next_to(before, item, after=False)
    else:
        container.put_at_end(item)


class BoardStore:
    """In-memory store for boards, columns and cards."""

    def __init__(self) -> None:
        self.boards: Dict[str, Board] = {}

    # === Board operations ===
    def create_board(self, name: str, description: Optional[str]) -> Board:
        now = datetime.now(timezone.utc)
        board = Board(
            id=str(uuid.uuid4()),
            name=name.strip(),
            description=description.strip() if description else None,
            created_at=now,
            updated_at=now,
            version=1,
        )
        self.boards[board.id] = board
        logger.info("created board %s", board.id)
        return board

    def list_boards(self) -> List[Board]:
        return list(self.boards.values())

    def get_board(self, board_id: str) -> Board:
        try:
            return self.boards[board_id]
        except KeyError:
            raise NotFound(f"board {board_id!r} does not exist") from None

    def add_board(self, board: Board) -> None:
        self.boards[board.id] = board

    def delete_board(self, board_id: str) -> None:
        self.get_board(board_id)
        del self.boards[board_id]

    # === Column operations ===
    def get_column(self, board: Board, column_id: str) -> Column:
        try:
            return board.column_index[column_id]
        except KeyError:
            raise NotFound(f"column {column_id!r} does not exist") from None

    def create_column(
        self,
        board: Board,
        name: str,
        before_id: Optional[str],
        after_id: Optional[str],
    ) -> Column:
        before = self.get_column(board, before_id) if before_id else None
        after = self.get_column(board, after_id) if after_id else None
        now = datetime.now(timezone.utc)
        column = Column(
            id=str(uuid.uuid4()),
            board_id=board.id,
            name=name.strip(),
            created_at=now,
            updated_at=now,
        )
        place(board.columns, column, before, after)
        board.column_index[column.id] = column
        self._touch(board, now)
        return column

    def move_column(
        self,
        board: Board,
        column: Column,
        before_id: Optional[str],
        after_id: Optional[str],
    ) -> Column:
        before = self.get_column(board, before_id) if before_id else None
        after = self.get_column(board, after_id) if after_id else None
        place(board.columns, column, before, after)
        column.updated_at = datetime.now(timezone.utc)
        self._touch(board, column.updated_at)
        return column

    def delete_column(self, board: Board, column_id: str) -> None:
        # remove column and its cards
        column = self.get_column(board, column_id)
        for card in column.cards.elements():
            del board.card_index[card.id]
        board.columns.remove(column)
        del board.column_index[column_id]
        self._touch(board)

    # === Card operations ===
    def get_card(self, board: Board, card_id: str, column: Optional[Column] = None) -> Card:
        card = board.card_index.get(card_id)
        if card is None or (column is not None and card.column_id != column.id):
            raise NotFound(f"card {card_id!r} does not exist")
        return card

    def create_card(
        self,
        board: Board,
        column: Column,
        title: str,
        description: Optional[str],
        before_id: Optional[str],
        after_id: Optional[str],
    ) -> Card:
        before = self.get_card(board, before_id, column) if before_id else None
        after = self.get_card(board, after_id, column) if after_id else None
        now = datetime.now(timezone.utc)
        card = Card(
            id=str(uuid.uuid4()),
            board_id=board.id,
            column_id=column.id,
            title=title.strip(),
            description=description.strip() if description else None,
            created_at=now,
            updated_at=now,
        )
        place(column.cards, card, before, after)
        board.card_index[card.id] = card
        column.updated_at = now
        self._touch(board, now)
        return card

    def move_card(
        self,
        board: Board,
        card: Card,
        to_column: Column,
        before_id: Optional[str],
        after_id: Optional[str],
    ) -> Card:
        before = self.get_card(board, before_id, to_column) if before_id else None
        after = self.get_card(board, after_id, to_column) if after_id else None
        from_column = self.get_column(board, card.column_id)
        # place first: a failed placement leaves the card where it was
        place(to_column.cards, card, before, after)
        if from_column is not to_column:
            from_column.cards.discard(card)
        card.column_id = to_column.id
        now = datetime.now(timezone.utc)
        card.updated_at = now
        self._touch(board, now)
        return card

    def delete_card(self, board: Board, column: Column, card_id: str) -> None:
        card = self.get_card(board, card_id, column)
        column.cards.remove(card)
        del board.card_index[card_id]
        self._touch(board)

    # === Ordering maintenance ===
    def sort_cards(self, board: Board, column: Column, by: str, reverse: bool = False) -> None:
        if by == "title":
            column.cards.sort_by(lambda c: c.title.casefold(), reverse=reverse)
        else:
            column.cards.sort_by(lambda c: c.created_at, reverse=reverse)
        self._touch(board)

    def compact(self, board: Board) -> None:
        """Shorten every key of the board back to its minimal length."""
        board.columns.recompute()
        for column in board.columns.elements():
            column.cards.recompute()
        logger.info("compacted board %s", board.id)
        self._touch(board)

    def _touch(self, board: Board, now: Optional[datetime] = None) -> None:
        board.version += 1
        board.updated_at = now or datetime.now(timezone.utc)


store = BoardStore()
