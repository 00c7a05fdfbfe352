from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from linebot.v3 import WebhookParser
from linebot.v3.exceptions import InvalidSignatureError
from linebot.v3.messaging import AsyncApiClient, AsyncMessagingApi, Configuration
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .chat.orchestrator import ConversationOrchestrator
from .config import DEFAULT_SERVER_CONFIG
from .dependencies import get_dispatcher, get_parser
from .favorites.config import DEFAULT_FAVORITES_CONFIG
from .favorites.db import init_db, make_engine, make_session_factory
from .favorites.store import FavoritesStore
from .messaging.channel import LineReplyChannel
from .messaging.config import DEFAULT_LINE_CONFIG
from .messaging.dispatcher import EventDispatcher
from .places.client import PlacesGateway
from .tunnel import start_tunnel, stop_tunnel

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1. Favorites database; the bot does not start without it
    engine = make_engine(DEFAULT_FAVORITES_CONFIG)
    try:
        await run_in_threadpool(init_db, engine)
    except SQLAlchemyError:
        logger.critical("Cannot connect to the favorites database, aborting startup", exc_info=True)
        engine.dispose()
        raise

    # 2. Outbound clients
    places = PlacesGateway()
    api_client = AsyncApiClient(Configuration(access_token=DEFAULT_LINE_CONFIG.channel_access_token))
    line_api = AsyncMessagingApi(api_client)

    # 3. Conversation wiring
    orchestrator = ConversationOrchestrator(places, FavoritesStore(make_session_factory(engine)))
    app.state.dispatcher = EventDispatcher(
        orchestrator,
        lambda event: LineReplyChannel(line_api, event.user_id, event.reply_token),
    )

    # 4. Local tunnel for webhook development
    public_url = None
    if DEFAULT_SERVER_CONFIG.is_local:
        public_url = await run_in_threadpool(
            start_tunnel, DEFAULT_SERVER_CONFIG.port, DEFAULT_SERVER_CONFIG.ngrok_authtoken,
        )
    else:
        logger.info(
            "Set http://<host>:%s/callback as the Webhook URL", DEFAULT_SERVER_CONFIG.port,
        )

    try:
        yield
    finally:
        if public_url:
            stop_tunnel(public_url)
        app.state.dispatcher = None
        await places.aclose()
        await api_client.close()
        engine.dispose()


app = FastAPI(title="Restaurant Finder LINE Bot", version="1.0.0", lifespan=lifespan)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/")
def root() -> dict[str, str]:
    return {"status": "success", "message": "Connected successfully!"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/stats")
def stats() -> dict:
    return compute_analytics(get_events())


# ── LINE webhook ─────────────────────────────────────────────────────────


@app.post("/callback")
async def callback(
    request: Request,
    x_line_signature: str = Header(default=""),
    parser: WebhookParser = Depends(get_parser),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    body = (await request.body()).decode("utf-8")

    # 1. Verify signature and parse the batch
    try:
        events = parser.parse(body, x_line_signature)
    except InvalidSignatureError:
        raise HTTPException(status_code=400, detail="Invalid signature")
    except ValueError:
        logger.warning("Malformed webhook body", exc_info=True)
        raise HTTPException(status_code=400, detail="Malformed webhook body")

    # 2. LINE's "Verify" button sends an empty batch
    if not events:
        return {"status": "success", "handled": 0}

    # 3. Dispatch
    try:
        handled = await dispatcher.dispatch(events)
    except Exception:
        logger.exception("Webhook batch failed")
        return JSONResponse(status_code=500, content={"status": "error"})

    return {"status": "success", "handled": handled}
