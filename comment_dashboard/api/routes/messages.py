"""Message channel endpoints.

- POST /messages: deliver one inbound UI message, receive the outbound
  messages it produced (plus any still pending, e.g. plugin-ready)
- GET /messages: drain pending outbound messages
- GET /ui: current UI size and closed flag
"""

from fastapi import APIRouter, Request

from comment_dashboard.api.models import InboundMessage, UIStateModel
from comment_dashboard.api.responses import SESSION_UNAVAILABLE, raise_api_error, wrap_response
from comment_dashboard.session import PluginSession
from comment_dashboard.utils.logging_config import get_logger

router = APIRouter(tags=["messages"])
logger = get_logger(__name__)


def _get_session(request: Request) -> PluginSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise_api_error(SESSION_UNAVAILABLE, "Plugin session is not running")
    return session


def _drain(session: PluginSession) -> list:
    messages = list(session.outbox)
    session.outbox.clear()
    return messages


@router.post("/messages")
async def post_message(request: Request, message: InboundMessage):
    """Handle one inbound message and return the resulting outbound messages."""
    session = _get_session(request)
    payload = message.model_dump()

    logger.info("bridge_message_received", message_type=payload["type"])
    await session.handle_message(payload)

    messages = _drain(session)
    return wrap_response(messages, total=len(messages))


@router.get("/messages")
async def get_messages(request: Request):
    """Return and clear outbound messages not yet delivered."""
    session = _get_session(request)
    messages = _drain(session)
    return wrap_response(messages, total=len(messages))


@router.get("/ui")
async def get_ui_state(request: Request):
    session = _get_session(request)
    width, height = session.state.ui_size or (None, None)
    ui = UIStateModel(width=width, height=height, closed=session.state.closed)
    return wrap_response(ui.model_dump())
