"""FastAPI application: documentation chat API plus the MCP tool endpoint."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

load_dotenv()

from src.config import Settings, get_settings
from src.llm_client import create_llm_client
from src.search_client import SearchClient

from .chat import ChatOrchestrator
from .mcp_server import create_mcp_server
from .routes import router
from .session_store import SessionStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    search_client = SearchClient(
        host=settings.meili_host,
        api_key=settings.meili_api_key,
        index_name=settings.meili_index_name,
        timeout=settings.search_timeout_sec,
    )
    llm_client = create_llm_client(settings)
    store = SessionStore()
    mcp = create_mcp_server(search_client)
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.start()
        try:
            async with mcp.session_manager.run():
                logger.info(
                    "Ready: index=%s model=%s",
                    settings.meili_index_name,
                    settings.llm_model if llm_client else "unconfigured",
                )
                yield
        finally:
            await store.stop()
            await search_client.aclose()
            if llm_client is not None:
                await llm_client.aclose()

    app = FastAPI(title="Docs Chat API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.orchestrator = ChatOrchestrator(search_client, llm_client, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Mounted last: the routes above take GET / and /api/*, everything else
    # (POST / in particular) reaches the MCP transport.
    app.mount("/", mcp_app)
    return app


app = create_app()
