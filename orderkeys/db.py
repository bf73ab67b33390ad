from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, LargeBinary, String, Text, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.types import TypeDecorator

from .config import get_settings
from .container import from_keyed
from .errors import NotFound
from .keys import OrderKey
from .models import Board, Card, Column, get_sort_key, set_sort_key


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


settings = get_settings()
DATABASE_URL = settings.database_url
KEY_WIDTH: Optional[int] = settings.key_width or None


class OrderKeyType(TypeDecorator):
    """Stores an :class:`OrderKey` as its raw digits in a binary column.

    Given a ``width``, keys are zero-padded to that fixed length on the way in
    and the padding is stripped on the way out. Either way the database
    orders the column the same way the keys order.
    """

    impl = LargeBinary
    cache_ok = True

    def __init__(self, width: Optional[int] = None) -> None:
        super().__init__(width)
        self.width = width

    def process_bind_param(self, value: Optional[OrderKey], dialect) -> Optional[bytes]:
        if value is None:
            return None
        if self.width:
            return value.right_pad(self.width)
        return bytes(value)

    def process_result_value(self, value: Optional[bytes], dialect) -> Optional[OrderKey]:
        if value is None:
            return None
        if self.width:
            return OrderKey.from_padded(value, self.width)
        return OrderKey(value)


class Base(DeclarativeBase):
    pass


class BoardRow(Base):
    __tablename__ = "boards"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(140))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class ColumnRow(Base):
    __tablename__ = "columns"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    board_id: Mapped[str] = mapped_column(String(36), ForeignKey("boards.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(80))
    sort_key: Mapped[OrderKey] = mapped_column(OrderKeyType(KEY_WIDTH), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class CardRow(Base):
    __tablename__ = "cards"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    board_id: Mapped[str] = mapped_column(String(36), ForeignKey("boards.id", ondelete="CASCADE"))
    column_id: Mapped[str] = mapped_column(String(36), ForeignKey("columns.id", ondelete="CASCADE"))
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_key: Mapped[OrderKey] = mapped_column(OrderKeyType(KEY_WIDTH), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def save_board(session: Session, board: Board) -> None:
    """Write a board with its columns and cards, replacing any previous copy."""
    session.execute(delete(CardRow).where(CardRow.board_id == board.id))
    session.execute(delete(ColumnRow).where(ColumnRow.board_id == board.id))
    session.merge(
        BoardRow(
            id=board.id,
            name=board.name,
            description=board.description,
            version=board.version,
            created_at=board.created_at,
            updated_at=board.updated_at,
        )
    )
    session.flush()
    for column, key in board.columns.items():
        session.add(
            ColumnRow(
                id=column.id,
                board_id=board.id,
                name=column.name,
                sort_key=key,
                created_at=column.created_at,
                updated_at=column.updated_at,
            )
        )
    session.flush()
    for column in board.columns.elements():
        for card, key in column.cards.items():
            session.add(
                CardRow(
                    id=card.id,
                    board_id=board.id,
                    column_id=column.id,
                    title=card.title,
                    description=card.description,
                    sort_key=key,
                    created_at=card.created_at,
                    updated_at=card.updated_at,
                )
            )
    session.flush()


def load_board(session: Session, board_id: str) -> Board:
    """Rebuild a board from the database, keeping the stored keys as they are."""
    row = session.get(BoardRow, board_id)
    if row is None:
        raise NotFound(f"board {board_id!r} does not exist")

    cards_by_column = defaultdict(list)
    for card_row in session.scalars(select(CardRow).where(CardRow.board_id == board_id)):
        cards_by_column[card_row.column_id].append(
            Card(
                id=card_row.id,
                board_id=board_id,
                column_id=card_row.column_id,
                title=card_row.title,
                description=card_row.description,
                created_at=card_row.created_at,
                updated_at=card_row.updated_at,
                sort_key=card_row.sort_key,
            )
        )

    columns = []
    for column_row in session.scalars(select(ColumnRow).where(ColumnRow.board_id == board_id)):
        cards = cards_by_column[column_row.id]
        columns.append(
            Column(
                id=column_row.id,
                board_id=board_id,
                name=column_row.name,
                created_at=column_row.created_at,
                updated_at=column_row.updated_at,
                sort_key=column_row.sort_key,
                cards=from_keyed(cards, get_sort_key, set_sort_key),
            )
        )

    return Board(
        id=row.id,
        name=row.name,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
        columns=from_keyed(columns, get_sort_key, set_sort_key),
        column_index={c.id: c for c in columns},
        card_index={card.id: card for cards in cards_by_column.values() for card in cards},
    )
