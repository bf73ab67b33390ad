from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .container import ReorderableContainer, reorderable_set_of
from .keys import OrderKey


def get_sort_key(item: Any) -> OrderKey:
    return item.sort_key


def set_sort_key(item: Any, key: OrderKey) -> None:
    item.sort_key = key


def ordered(*items: Any) -> ReorderableContainer:
    """Container writing its keys onto the items' ``sort_key`` attribute."""
    return reorderable_set_of(*items, get_key=get_sort_key, set_key=set_sort_key)


# === Domain objects used by the in-memory store ===
# eq=False keeps identity hashing, the containers need hashable elements


@dataclass(eq=False)
class Card:
    id: str
    board_id: str
    column_id: str
    title: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    sort_key: Optional[OrderKey] = None


@dataclass(eq=False)
class Column:
    id: str
    board_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    sort_key: Optional[OrderKey] = None
    cards: ReorderableContainer = field(default_factory=ordered)


@dataclass(eq=False)
class Board:
    id: str
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    version: int = 0
    columns: ReorderableContainer = field(default_factory=ordered)
    column_index: Dict[str, Column] = field(default_factory=dict)
    card_index: Dict[str, Card] = field(default_factory=dict)


# === API Schemas ===


class BoardCreate(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    description: Optional[str] = Field(default=None, max_length=2000)


class BoardOut(BaseModel):
    id: str
    name: str
    description: Optional[str]
    createdAt: datetime
    updatedAt: datetime
    version: int
    columnsCount: int


class ColumnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    beforeColumnId: Optional[str] = None
    afterColumnId: Optional[str] = None


class ColumnMove(BaseModel):
    beforeColumnId: Optional[str] = None
    afterColumnId: Optional[str] = None


class ColumnOut(BaseModel):
    id: str
    boardId: str
    name: str
    sortKey: str
    createdAt: datetime
    updatedAt: datetime


class CardCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=8000)
    beforeCardId: Optional[str] = None
    afterCardId: Optional[str] = None


class CardMove(BaseModel):
    toColumnId: Optional[str] = None
    beforeCardId: Optional[str] = None
    afterCardId: Optional[str] = None


class CardOut(BaseModel):
    id: str
    boardId: str
    columnId: str
    title: str
    description: Optional[str]
    sortKey: str
    createdAt: datetime
    updatedAt: datetime


class CardSort(BaseModel):
    by: Literal["title", "createdAt"] = "title"
    reverse: bool = False
