"""
HTTP/WebSocket API for the journey runner UI.

Endpoints:

- GET  /api/journeys     - discovered journeys [{id, name, path}]
- POST /api/tests/run    - start a run; 409 while another run is active
- POST /api/tests/stop   - stop the active run
- GET  /api/tests/status - {"running": bool}
- WS   /ws               - live run events as JSON, one message per event

Run requests return immediately; results are only delivered over /ws.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, WebSocket
from pydantic import BaseModel, Field

from unified_automation import __version__
from unified_automation.config import AutomationSettings, UnifiedAutomationConfig
from unified_automation.errors import DiscoveryError, RunAlreadyActiveError
from unified_automation.journeys import discover_journeys
from unified_automation.orchestrator import RunManager
from unified_automation.types import Backend, DisplayMode, RunRequest

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models for API
# ============================================================================


class RunTestsRequest(BaseModel):
    """Body of POST /api/tests/run."""
    journeys: List[str] = Field(..., min_length=1, description="Journey identifiers in execution order")
    tool: Optional[Backend] = Field(default=None, description="playwright or selenium (default from config)")
    mode: Optional[DisplayMode] = Field(default=None, description="headed or headless (default from config)")
    config: Dict[str, str] = Field(default_factory=dict, description="Environment overrides for every runner")
    keep_browser_open: bool = Field(default=False, description="Leave the browser open (single journey only)")


class JourneyResponse(BaseModel):
    id: str
    name: str
    path: str


class StatusResponse(BaseModel):
    status: str


class RunningResponse(BaseModel):
    running: bool


# ============================================================================
# Application
# ============================================================================


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.to_dict())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Client messages carry no meaning; read them only to notice the close
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


def create_router(config: UnifiedAutomationConfig, manager: RunManager) -> APIRouter:
    router = APIRouter()

    @router.get("/api/journeys", response_model=List[JourneyResponse])
    async def list_journeys_endpoint():
        try:
            journeys = discover_journeys(config.settings.journeys_package, require=False)
        except DiscoveryError as e:
            logger.error(f"Journey discovery failed: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to discover journeys: {e}")
        return [journey.to_dict() for journey in journeys]

    @router.post("/api/tests/run", response_model=StatusResponse)
    async def run_tests(body: RunTestsRequest):
        try:
            request = RunRequest(
                journeys=body.journeys,
                backend=body.tool or config.default_tool,
                mode=body.mode or config.default_mode,
                config=body.config,
                keep_browser_open=body.keep_browser_open,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        try:
            manager.start(request)
        except RunAlreadyActiveError as e:
            raise HTTPException(status_code=409, detail=str(e))

        logger.info(f"Run started: {request.journeys} ({request.backend.value}, {request.mode.value})")
        return {"status": "started"}

    @router.post("/api/tests/stop", response_model=StatusResponse)
    async def stop_tests():
        if manager.stop():
            return {"status": "stopped"}
        return {"status": "no tests running"}

    @router.get("/api/tests/status", response_model=RunningResponse)
    async def tests_status():
        return {"running": manager.is_running}

    @router.websocket("/ws")
    async def events_websocket(websocket: WebSocket):
        # Subscribe before accepting so no event after the handshake is missed
        queue = manager.broadcaster.subscribe()
        sender: Optional[asyncio.Task] = None
        try:
            await websocket.accept()
            sender = asyncio.create_task(_forward_events(websocket, queue))
            await _wait_for_disconnect(websocket)
        finally:
            manager.broadcaster.unsubscribe(queue)
            if sender is not None:
                sender.cancel()
                await asyncio.wait([sender])
                if not sender.cancelled() and sender.exception() is not None:
                    logger.debug(f"Event sender stopped: {sender.exception()}")

    return router


def create_app(
    config: Optional[UnifiedAutomationConfig] = None,
    manager: Optional[RunManager] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Loaded configuration (defaults to environment-based settings)
        manager: Run manager to use (tests inject one with a custom command builder)
    """
    if config is None:
        config = UnifiedAutomationConfig(settings=AutomationSettings.from_env())
    if manager is None:
        manager = RunManager(base_env=config.runner_env())

    app = FastAPI(
        title="Unified Automation API",
        description="Run browser journeys and stream their output",
        version=__version__,
    )
    app.state.config = config
    app.state.run_manager = manager
    app.include_router(create_router(config, manager))
    return app
