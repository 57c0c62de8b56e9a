from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...config import Settings, get_settings
from ...engine.color import Color
from ...engine.game import Game
from ...engine.move import Move, square_to_str
from ...engine.perft import perft as perft_nodes
from ...search.service import SearchService


logger = logging.getLogger(__name__)


class MoveOut(BaseModel):
    from_square: str
    to_square: str
    type: str
    promotion: Optional[str] = None
    label: str

    @classmethod
    def of(cls, move: Move) -> "MoveOut":
        return cls(
            from_square=square_to_str(*move.origin),
            to_square=square_to_str(*move.destination),
            type=move.type.name.lower(),
            promotion=move.promotion,
            label=move.label(),
        )


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    from_square: str = Field(..., min_length=2, max_length=2, description="e.g. e2")
    to_square: str = Field(..., min_length=2, max_length=2, description="e.g. e4")
    promotion: Optional[str] = Field(default=None, pattern="^[qrbnQRBN]$")


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1)
    color: Optional[str] = Field(default=None, description="white/black; side to move if omitted")
    apply: bool = False


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=5)


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: List[MoveOut]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: List[str]


class MovesResponse(BaseModel):
    moves: List[MoveOut]


class SearchResponse(BaseModel):
    best_move: Optional[MoveOut]
    score: Optional[int]
    source: str
    mate_line: List[str]
    nodes: int
    depth: int
    time_ms: int
    fen: str


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="CPU Chess API", version="0.1.0")

    logging.basicConfig(level=settings.log_level.upper())

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    search_service = SearchService(settings)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game = Game.new()
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/moves", response_model=MovesResponse)
    async def list_moves(
        game_id: str, square: Optional[str] = None, color: Optional[str] = None
    ) -> MovesResponse:
        game = _require_game(store, game_id)
        if square is not None:
            moves = game.moves_from(square)
        else:
            moves = game.legal_moves(Color.parse(color) if color else None)
        return MovesResponse(moves=[MoveOut.of(m) for m in moves])

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        game = Game.from_fen(req.fen)
        store.set(game_id, game)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        move = game.find_move(req.from_square, req.to_square, req.promotion)
        game.apply_move(move)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        game.undo_move()
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    async def search(game_id: str, req: SearchRequest) -> SearchResponse:
        game = _require_game(store, game_id)
        if req.depth is not None and req.depth > settings.max_search_depth:
            raise HTTPException(
                status_code=400, detail=f"depth must be <= {settings.max_search_depth}"
            )
        color = Color.parse(req.color) if req.color else game.side_to_move
        res = search_service.search(game.board, color, req.depth)
        if req.apply and res.best_move is not None:
            if color is not game.side_to_move:
                raise HTTPException(status_code=409, detail="not this color's turn")
            game.apply_move(res.best_move)
        return SearchResponse(
            best_move=MoveOut.of(res.best_move) if res.best_move else None,
            score=res.score,
            source=res.source,
            mate_line=[m.label() for m in res.mate_line],
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            fen=game.to_fen(),
        )

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        game = Game.from_fen(req.fen)
        return {"depth": req.depth, "nodes": perft_nodes(game.board, req.depth)}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history_labels()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.name.lower(),
        legal_moves=[MoveOut.of(m) for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
