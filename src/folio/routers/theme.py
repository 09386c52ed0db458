"""Theme preference endpoints and the live theme WebSocket.

HTTP requests resolve the theme from the ``theme-preference`` cookie and the
``Sec-CH-Prefers-Color-Scheme`` client hint. The hint is requested with
``Critical-CH`` so the browser retries the first request with it and the very
first render already carries the right theme.

A page that wants live updates opens ``/ws/theme``. The connection owns one
:class:`ThemeController` and feeds it the browser's ``matchMedia`` changes:

    client -> {"type": "system_theme", "prefers_dark": true}
    client -> {"type": "set_preference", "preference": "dark"}
    client -> {"type": "get_state"}
    server -> {"type": "theme_state", ...}
    server -> {"type": "storage_set", "key": "theme-preference", "value": "dark"}
    server -> {"type": "error", "error": "..."}
"""

import asyncio
import json
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Request, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from ..config import settings
from ..theme import (
    COLOR_SCHEME_HINT_HEADER,
    PALETTES,
    CookieStorage,
    ForwardingStorage,
    PrefersDarkQuery,
    ResolvedTheme,
    RootSurface,
    SystemTheme,
    SystemThemeDetector,
    ThemeController,
    ThemePreference,
    ThemePreferenceStore,
    parse_color_scheme_hint,
    query_from_client_hint,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/theme", tags=["theme"])
ws_router = APIRouter(prefix="/ws", tags=["theme"])

CLIENT_HINT_HEADERS = {
    "Accept-CH": COLOR_SCHEME_HINT_HEADER,
    "Critical-CH": COLOR_SCHEME_HINT_HEADER,
    "Vary": COLOR_SCHEME_HINT_HEADER,
}


# --- Models ---


class SurfaceInfo(BaseModel):
    """Root element tokens and custom properties to apply."""

    classes: List[str]
    variables: Dict[str, str]
    html_attributes: Dict[str, str]


class ThemeStateResponse(BaseModel):
    preference: ThemePreference
    system_theme: SystemTheme
    resolved_theme: ResolvedTheme
    surface: SurfaceInfo


class ThemePreferenceUpdate(BaseModel):
    preference: ThemePreference


# --- Helpers ---


def state_response(controller: ThemeController) -> ThemeStateResponse:
    state = controller.snapshot()
    surface = controller.surface
    return ThemeStateResponse(
        preference=state.preference,
        system_theme=state.system_theme,
        resolved_theme=state.resolved_theme,
        surface=SurfaceInfo(
            classes=surface.classes,
            variables=surface.variables,
            html_attributes=surface.html_attributes(),
        ),
    )


def get_cookie_storage(request: Request) -> CookieStorage:
    return CookieStorage(
        request.cookies,
        max_age=settings.theme_cookie_max_age,
        secure=request.url.scheme == "https",
    )


def build_controller(request: Request, storage: CookieStorage) -> ThemeController:
    store = ThemePreferenceStore(storage, key=settings.theme_cookie_name)
    hint = request.headers.get(COLOR_SCHEME_HINT_HEADER)
    detector = SystemThemeDetector(query_from_client_hint(hint))
    return ThemeController(store, detector, RootSurface())


# --- Endpoints ---


@router.get("", response_model=ThemeStateResponse)
async def get_theme(
    request: Request,
    response: Response,
    storage: CookieStorage = Depends(get_cookie_storage),
):
    """Resolve the requester's theme."""
    response.headers.update(CLIENT_HINT_HEADERS)
    with build_controller(request, storage) as controller:
        return state_response(controller)


@router.put("", response_model=ThemeStateResponse)
async def set_theme(
    update: ThemePreferenceUpdate,
    request: Request,
    response: Response,
    storage: CookieStorage = Depends(get_cookie_storage),
):
    """Store an explicit preference in the visitor's cookie."""
    response.headers.update(CLIENT_HINT_HEADERS)
    with build_controller(request, storage) as controller:
        controller.set_preference(update.preference)
        storage.apply_to(response)
        return state_response(controller)


@router.get("/palettes")
async def get_palettes():
    """CSS custom properties for each resolved theme."""
    return {theme.value: palette.css_variables() for theme, palette in PALETTES.items()}


# --- WebSocket ---


def _initial_prefers_dark(websocket: WebSocket) -> bool:
    """Initial host signal: ``?prefers_dark=`` wins over the client hint."""
    param = websocket.query_params.get("prefers_dark")
    if param is not None:
        return param.strip().lower() in ("1", "true", "yes", "dark")
    return bool(parse_color_scheme_hint(websocket.headers.get(COLOR_SCHEME_HINT_HEADER)))


async def _flush(outbox: "asyncio.Queue[dict]", websocket: WebSocket) -> None:
    while not outbox.empty():
        await websocket.send_json(outbox.get_nowait())


def _handle_message(
    raw: str,
    controller: ThemeController,
    query: PrefersDarkQuery,
    outbox: "asyncio.Queue[dict]",
) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        outbox.put_nowait({"type": "error", "error": "Message is not valid JSON"})
        return
    if not isinstance(message, dict):
        outbox.put_nowait({"type": "error", "error": "Message must be an object"})
        return

    msg_type = message.get("type")
    if msg_type == "system_theme":
        prefers_dark = message.get("prefers_dark")
        if not isinstance(prefers_dark, bool):
            outbox.put_nowait({"type": "error", "error": "prefers_dark must be a boolean"})
            return
        query.report(prefers_dark)
    elif msg_type == "set_preference":
        try:
            controller.set_preference(message.get("preference"))
        except ValueError as e:
            outbox.put_nowait({"type": "error", "error": str(e)})
    elif msg_type == "get_state":
        outbox.put_nowait(_state_message(controller))
    else:
        outbox.put_nowait({"type": "error", "error": f"Unknown message type: {msg_type!r}"})


def _state_message(controller: ThemeController) -> dict:
    payload = state_response(controller).model_dump(mode="json")
    payload["type"] = "theme_state"
    return payload


@ws_router.websocket("/theme")
async def theme_session(websocket: WebSocket):
    """Live theme session for one page."""
    await websocket.accept()

    outbox: "asyncio.Queue[dict]" = asyncio.Queue()

    def forward(key: str, value: str) -> None:
        outbox.put_nowait({"type": "storage_set", "key": key, "value": value})

    def on_apply(_surface: RootSurface) -> None:
        outbox.put_nowait(_state_message(controller))

    query = PrefersDarkQuery(_initial_prefers_dark(websocket))
    storage = ForwardingStorage(websocket.cookies, forward)
    controller = ThemeController(
        ThemePreferenceStore(storage, key=settings.theme_cookie_name),
        SystemThemeDetector(query),
        RootSurface(on_apply=on_apply),
    )

    try:
        controller.initialize()
        await _flush(outbox, websocket)
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            if frame.get("text") is not None:
                _handle_message(frame["text"], controller, query, outbox)
            else:
                outbox.put_nowait({"type": "error", "error": "Message must be text"})
            await _flush(outbox, websocket)
    except WebSocketDisconnect:
        logger.debug("Theme session disconnected")
    except Exception:
        logger.exception("Theme session failed")
    finally:
        controller.close()
