"""API routes: health, documentation chat, and a canned chat fixture."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from src.errors import ChatError, UpstreamError

from .models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse, SourceResponse

logger = logging.getLogger(__name__)

router = APIRouter()

HEALTH_MESSAGE = "Add this MCP server to your agent so they can search in our docs!"

_MOCK_RESPONSE = ChatResponse(
    message=(
        "# What is a Smart Contract on NEAR?\n\n"
        "A **smart contract** on NEAR Protocol is a self-executing program that runs on the "
        "blockchain.\n\n"
        "## Key Characteristics on NEAR\n\n"
        "### Every Account is a Smart Contract\n"
        "On NEAR, **every account is also a smart contract**. Each account can have its own "
        "code and logic.\n\n"
        "### Asynchronous Execution\n"
        "When a contract calls another contract, it doesn't wait for the response before "
        "continuing. NEAR uses **promises and callbacks** to handle these interactions.\n\n"
        "## Supported Languages\n\n"
        "- **JavaScript** - Great for web developers\n"
        "- **Rust** - Preferred for performance-critical applications"
    ),
    thread_id="thread_1770940894006",
    sources=[
        SourceResponse(title="What is a Smart Contract?", path="/smart-contracts/what-is"),
        SourceResponse(title="Smart Contracts", path="/quest/accounts/smart-contracts"),
        SourceResponse(title="Understanding Smart Contracts", path="/quest/smart-contracts"),
        SourceResponse(title="Your First Smart Contract", path="/smart-contracts/quickstart"),
        SourceResponse(title="Ensure it is the User (1yⓃ)", path="/smart-contracts/security/one-yocto"),
    ],
)


@router.get("/", response_class=PlainTextResponse)
def root():
    return HEALTH_MESSAGE


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(request: Request, req: ChatRequest | None = None):
    req = req or ChatRequest()
    orchestrator = request.app.state.orchestrator

    try:
        reply = await orchestrator.handle(req.messages, req.thread_id)
    except ChatError as e:
        if e.status_code >= 500:
            logger.error("Chat error: %s: %s", type(e).__name__, e)
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message})
    except Exception:
        logger.exception("Chat error")
        return JSONResponse(status_code=500, content={"error": ChatError.public_message})

    return ChatResponse(
        message=reply.message,
        thread_id=reply.thread_id,
        sources=[SourceResponse(title=s.title, path=s.path) for s in reply.sources],
    )


@router.post("/api/chatMock", response_model=ChatResponse)
def chat_mock():
    return _MOCK_RESPONSE


@router.get("/api/health", response_model=HealthResponse)
async def health(request: Request):
    state = request.app.state
    try:
        await state.orchestrator.search_client.health()
        search = "up"
    except UpstreamError:
        search = "down"
    return HealthResponse(
        status="ok",
        search=search,
        sessions=len(state.store),
        llm_configured=state.orchestrator.llm_client is not None,
    )
