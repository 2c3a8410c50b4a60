"""
Server entry point — FastAPI app exposing the emulation tools over HTTP.
A single browser session is launched at startup and shared by all requests.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator
from typing import Any

import dotenv
import fastapi
import pydantic
import uvicorn
from fastapi.middleware import cors

from page_emulation.browser import session as browser_session
from page_emulation.config import get_settings
from page_emulation.models.emulation import EmulationState, ToolResult
from page_emulation.tools import registry
from page_emulation.utils import logger, serialization

dotenv.load_dotenv()

log = logger.create_logger("Server")


class PageInfo(pydantic.BaseModel):
    """An open page as reported to the controller."""

    index: int
    url: str
    selected: bool


class NewPageRequest(pydantic.BaseModel):
    url: str | None = None


def _get_session(request: fastapi.Request) -> browser_session.BrowserSession:
    return request.app.state.session


def _page_infos(session: browser_session.BrowserSession) -> list[PageInfo]:
    selected = session.get_selected_page()
    return [
        PageInfo(index=i, url=page.url, selected=page is selected)
        for i, page in enumerate(session.get_pages())
    ]


def create_app(
    session: browser_session.BrowserSession | None = None,
    *,
    launch_browser: bool = True,
) -> fastapi.FastAPI:
    """Build the FastAPI app around *session* (a new one by default)."""
    shared_session = session or browser_session.BrowserSession()

    @contextlib.asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None]:
        """Launch the browser on startup and close it on shutdown."""
        log.section("Page Emulation Server Started")
        app.state.session = shared_session
        logger.start_log_file("page-emulation")
        if launch_browser:
            await shared_session.launch_browser()
        try:
            yield
        finally:
            if launch_browser:
                await shared_session.close()
            logger.end_log_file()

    app = fastapi.FastAPI(title="Page Emulation Server", lifespan=lifespan)
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # Tools
    # ========================================================================

    @app.get("/api/tools")
    async def list_tools() -> list[dict[str, Any]]:
        """Describe every tool and its argument schema."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "category": tool.category,
                "readOnly": tool.read_only,
                "inputSchema": tool.input_schema(),
            }
            for tool in registry.TOOLS.values()
        ]

    @app.post("/api/tools/{name}", response_model=ToolResult)
    async def run_tool(
        name: str,
        request: fastapi.Request,
        arguments: dict[str, Any] | None = fastapi.Body(default=None),
    ) -> ToolResult:
        """Run a tool with a JSON object of arguments."""
        if name not in registry.TOOLS:
            raise fastapi.HTTPException(status_code=404, detail=f"Unknown tool: {name}")
        return await registry.call_tool(name, arguments, _get_session(request))

    @app.get("/api/emulation")
    async def emulation_state(request: fastapi.Request) -> dict[str, Any]:
        """Return the emulation settings currently in effect."""
        state: EmulationState = _get_session(request).get_emulation_state()
        return serialization.to_camel_dict(state)

    # ========================================================================
    # Pages
    # ========================================================================

    @app.get("/api/pages", response_model=list[PageInfo])
    async def list_pages(request: fastapi.Request) -> list[PageInfo]:
        """List the open pages and which one is selected."""
        session = _get_session(request)
        await session.create_pages_snapshot()
        return _page_infos(session)

    @app.post("/api/pages", response_model=list[PageInfo])
    async def open_page(request: fastapi.Request, body: NewPageRequest) -> list[PageInfo]:
        """Open (and select) a new page, optionally navigating it to ``url``."""
        session = _get_session(request)
        try:
            await session.new_page(body.url)
        except Exception as exc:
            log.warn("Failed to open page", {"url": body.url, "error": str(exc)})
            raise fastapi.HTTPException(status_code=502, detail=f"Failed to open page: {exc}") from exc
        return _page_infos(session)

    @app.post("/api/pages/{index}/select", response_model=list[PageInfo])
    async def select_page(index: int, request: fastapi.Request) -> list[PageInfo]:
        """Select the page that single-page tools act on."""
        session = _get_session(request)
        await session.create_pages_snapshot()
        try:
            session.select_page(index)
        except IndexError as exc:
            raise fastapi.HTTPException(status_code=404, detail=str(exc)) from exc
        return _page_infos(session)

    return app


app = create_app()


def main() -> None:
    """Run the server with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
