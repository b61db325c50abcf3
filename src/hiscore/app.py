"""FastAPI app for the high score server.

Provides endpoints for:
    - Issuing signed play tokens (POST /start)
    - Recording finished games (POST /record)
    - Clearing the leaderboard with the admin password (POST /reset)
    - Streaming the top scores as Server-Sent Events (GET /events)
    - Serving the bundled frontend (GET /*)

Components live on ``app.state``; nothing here is module-global, so tests
can build as many independent apps as they like.
"""

from __future__ import annotations

import hmac
import logging
from importlib.resources import files
from pathlib import Path
from typing import Annotated, Final
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from hiscore.models import Score, Token
from hiscore.publisher import LeaderboardPublisher
from hiscore.store import ScoreStore
from hiscore.tokens import TokenCodec
from hiscore.validator import ScoreRejected, SubmissionValidator

# Frontend bundled with package (HTML, JS)
STATIC_DIR: Final = Path(str(files("hiscore") / "static"))

# Viewers may be served from another origin
SSE_HEADERS: Final = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Expose-Headers": "Content-Type",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

FORM_CONTENT_TYPE: Final = "application/x-www-form-urlencoded"

log: Final = logging.getLogger(__name__)
router: Final = APIRouter()


def get_codec(request: Request) -> TokenCodec:
    return request.app.state.codec


def get_store(request: Request) -> ScoreStore:
    return request.app.state.store


def get_validator(request: Request) -> SubmissionValidator:
    return request.app.state.validator


def get_publisher(request: Request) -> LeaderboardPublisher:
    return request.app.state.publisher


async def _form_password(request: Request) -> str:
    """Read ``pw`` from a urlencoded body, or return an empty string."""
    if not request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPE):
        return ""

    try:
        form = parse_qs((await request.body()).decode())
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="form body is not valid UTF-8") from e

    return form.get("pw", [""])[0]


@router.post("/start", status_code=201)
async def start(codec: Annotated[TokenCodec, Depends(get_codec)]) -> Token:
    """Issue a token stamped with the current time."""
    return codec.issue()


@router.post("/record", status_code=201)
async def record(score: Score, validator: Annotated[SubmissionValidator, Depends(get_validator)]) -> Response:
    """Admit a finished game; any failed check is a 400."""
    try:
        validator.admit(score)
    except ScoreRejected as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return Response(status_code=201)


@router.post("/reset")
async def reset(
    request: Request,
    store: Annotated[ScoreStore, Depends(get_store)],
    pw: str | None = None,
) -> Response:
    """Clear every score. The query ``pw`` wins over a form field."""
    if pw is None:
        pw = await _form_password(request)

    expected: str = request.app.state.admin_password
    if not hmac.compare_digest(pw.encode(), expected.encode()):
        raise HTTPException(status_code=403, detail="wrong password")

    store.reset_all()
    log.info("Cleared scores")
    return Response(status_code=200)


@router.get("/events")
async def events(request: Request, publisher: Annotated[LeaderboardPublisher, Depends(get_publisher)]) -> StreamingResponse:
    """Stream the top scores every tick until the client disconnects."""
    return StreamingResponse(
        publisher.frames(request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def _bad_request(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Undecodable or mistyped bodies are a plain 400, not FastAPI's 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(
    *,
    store: ScoreStore,
    codec: TokenCodec,
    admin_password: str,
    publisher: LeaderboardPublisher | None = None,
) -> FastAPI:
    """Build the app around explicitly owned components.

    Args:
        store: Leaderboard storage shared by every handler
        codec: Token codec holding the process HMAC key
        admin_password: Password accepted by POST /reset
        publisher: Event stream publisher (default: 500ms ticks, top 20)
    """
    app = FastAPI(title="hiscore", docs_url=None, redoc_url=None, openapi_url=None)

    app.state.store = store
    app.state.codec = codec
    app.state.admin_password = admin_password
    app.state.validator = SubmissionValidator(codec, store)
    app.state.publisher = publisher or LeaderboardPublisher(store)

    app.add_exception_handler(RequestValidationError, _bad_request)
    app.include_router(router)

    # Mounted last so the API routes above take precedence
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    return app
