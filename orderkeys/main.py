from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .boards import store
from .config import configure_logging, get_settings
from .errors import EmptyContainer, InvalidArgument, NotFound, PrecisionUnavailable
from .models import (
    Board,
    BoardCreate,
    BoardOut,
    Card,
    CardCreate,
    CardMove,
    CardOut,
    CardSort,
    Column,
    ColumnCreate,
    ColumnMove,
    ColumnOut,
)

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="orderkeys board API", version="1.0.0")


# === Error mapping ===


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFound)
def not_found(request: Request, exc: NotFound) -> JSONResponse:
    return _error(404, exc)


@app.exception_handler(InvalidArgument)
def invalid_argument(request: Request, exc: InvalidArgument) -> JSONResponse:
    return _error(400, exc)


@app.exception_handler(EmptyContainer)
@app.exception_handler(PrecisionUnavailable)
def conflict(request: Request, exc: Exception) -> JSONResponse:
    return _error(409, exc)


# === Helpers ===


def board_out(board: Board) -> BoardOut:
    return BoardOut(
        id=board.id,
        name=board.name,
        description=board.description,
        createdAt=board.created_at,
        updatedAt=board.updated_at,
        version=board.version,
        columnsCount=len(board.columns),
    )


def column_out(column: Column) -> ColumnOut:
    return ColumnOut(
        id=column.id,
        boardId=column.board_id,
        name=column.name,
        sortKey=column.sort_key.hex(),
        createdAt=column.created_at,
        updatedAt=column.updated_at,
    )


def card_out(card: Card) -> CardOut:
    return CardOut(
        id=card.id,
        boardId=card.board_id,
        columnId=card.column_id,
        title=card.title,
        description=card.description,
        sortKey=card.sort_key.hex(),
        createdAt=card.created_at,
        updatedAt=card.updated_at,
    )


# === Health & metadata ===


@app.get("/v1/health")
def health() -> dict:
    return {"status": "ok"}


# === Board endpoints ===


@app.post("/v1/boards", response_model=BoardOut, status_code=201)
def create_board(payload: BoardCreate):
    board = store.create_board(payload.name, payload.description)
    return board_out(board)


@app.get("/v1/boards", response_model=dict)
def list_boards():
    return {"boards": [board_out(b) for b in store.list_boards()]}


@app.get("/v1/boards/{board_id}", response_model=dict)
def get_board(board_id: str):
    board = store.get_board(board_id)
    columns = list(board.columns)
    return {
        "board": board_out(board),
        "columns": [column_out(c) for c in columns],
        "cards": [card_out(card) for c in columns for card in c.cards],
    }


@app.post("/v1/boards/{board_id}:compact", response_model=BoardOut)
def compact_board(board_id: str):
    board = store.get_board(board_id)
    store.compact(board)
    return board_out(board)


@app.delete("/v1/boards/{board_id}", status_code=204)
def delete_board(board_id: str):
    store.delete_board(board_id)
    return Response(status_code=204)


# === Column endpoints ===


@app.post("/v1/boards/{board_id}/columns", response_model=ColumnOut, status_code=201)
def create_column(board_id: str, payload: ColumnCreate):
    board = store.get_board(board_id)
    column = store.create_column(board, payload.name, payload.beforeColumnId, payload.afterColumnId)
    return column_out(column)


@app.post("/v1/boards/{board_id}/columns/{column_id}:move", response_model=ColumnOut)
def move_column(board_id: str, column_id: str, payload: ColumnMove):
    board = store.get_board(board_id)
    column = store.get_column(board, column_id)
    column = store.move_column(board, column, payload.beforeColumnId, payload.afterColumnId)
    return column_out(column)


@app.delete("/v1/boards/{board_id}/columns/{column_id}", status_code=204)
def delete_column(board_id: str, column_id: str):
    board = store.get_board(board_id)
    store.delete_column(board, column_id)
    return Response(status_code=204)


# === Card endpoints ===


@app.post("/v1/boards/{board_id}/columns/{column_id}/cards", response_model=CardOut, status_code=201)
def create_card(board_id: str, column_id: str, payload: CardCreate):
    board = store.get_board(board_id)
    column = store.get_column(board, column_id)
    card = store.create_card(
        board,
        column,
        payload.title,
        payload.description,
        payload.beforeCardId,
        payload.afterCardId,
    )
    return card_out(card)


@app.post("/v1/boards/{board_id}/columns/{column_id}/cards:sort", response_model=list[CardOut])
def sort_cards(board_id: str, column_id: str, payload: CardSort):
    board = store.get_board(board_id)
    column = store.get_column(board, column_id)
    store.sort_cards(board, column, payload.by, payload.reverse)
    return [card_out(c) for c in column.cards]


@app.post("/v1/boards/{board_id}/cards/{card_id}:move", response_model=CardOut)
def move_card(board_id: str, card_id: str, payload: CardMove):
    board = store.get_board(board_id)
    card = store.get_card(board, card_id)
    to_column = store.get_column(board, payload.toColumnId or card.column_id)
    card = store.move_card(board, card, to_column, payload.beforeCardId, payload.afterCardId)
    return card_out(card)


@app.delete("/v1/boards/{board_id}/columns/{column_id}/cards/{card_id}", status_code=204)
def delete_card(board_id: str, column_id: str, card_id: str):
    board = store.get_board(board_id)
    column = store.get_column(board, column_id)
    store.delete_card(board, column, card_id)
    return Response(status_code=204)
