import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from game.config import ConfigError, GameData, resolve_game
from game.engine import GameEngine, create_engine
from game.input_mapper import InputMapper
from game.settings import EngineSettings, load_settings
from games import StrategyRegistry

# Paths
BASE_DIR = Path(__file__).parent
STATIC_DIR = BASE_DIR / "static"

load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)

app = FastAPI(title="Learning Games")

SETTINGS: EngineSettings = load_settings(os.environ.get("GAME_SETTINGS") or None)


@app.get("/")
async def serve_index():
    """Serve the main index.html file."""
    index_path = STATIC_DIR / "index.html"
    if index_path.exists():
        return FileResponse(index_path)
    return {"error": "index.html not found"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/games")
async def list_games():
    """Return the game types the engine can run."""
    return {"games": StrategyRegistry.list_games(), "settings": SETTINGS.to_dict()}


@app.post("/games/validate")
async def validate_game(game: dict[str, Any]):
    """Check a generated game before the client tries to start it."""
    try:
        data = resolve_game(game)
    except ConfigError as e:
        return JSONResponse(status_code=422, content={"valid": False, **e.to_dict()})

    return {
        "valid": True,
        "type": data.type,
        "title": data.title,
        "items": len(data.config.items),
        "config": data.config.to_dict(),
    }


class SnapshotRenderer:
    """Keeps the latest frame for the websocket loop to send."""

    def __init__(self):
        self.latest: Optional[dict[str, Any]] = None
        self.frames = 0
        self.closed = False

    def draw(self, snapshot: dict[str, Any]) -> None:
        self.latest = snapshot
        self.frames += 1

    def close(self) -> None:
        self.closed = True
        self.latest = None


class GameSession:
    """Manages a single game session."""

    def __init__(self, settings: EngineSettings = SETTINGS):
        self.settings = settings
        self.engine: Optional[GameEngine] = None
        self.game: Optional[GameData] = None
        self.mapper: Optional[InputMapper] = None
        self.renderer: Optional[SnapshotRenderer] = None
        self.game_task: Optional[asyncio.Task] = None
        self.running: bool = False
        self.completed: bool = False
        self.completion_sent: bool = False
        self.last_sent: Optional[dict[str, Any]] = None

    def on_complete(self) -> None:
        self.completed = True

    def start(self, game: GameData, seed: Optional[int], now_ms: float) -> GameEngine:
        self.renderer = SnapshotRenderer()
        self.game = game
        self.mapper = InputMapper(game.type)
        self.completed = False
        self.completion_sent = False
        self.engine = create_engine(
            game.config,
            on_complete=self.on_complete,
            game_type=game.type,
            settings=self.settings,
            seed=seed,
            renderer=self.renderer,
        )
        self.engine.start(now_ms)
        self.last_sent = self.engine.current_state()
        return self.engine

    async def stop(self) -> None:
        """Stop the frame loop and tear the engine down."""
        self.running = False
        if self.game_task and not self.game_task.done():
            self.game_task.cancel()
            try:
                await self.game_task
            except asyncio.CancelledError:
                pass
        self.game_task = None
        if self.engine is not None:
            self.engine.destroy()


def _now_ms() -> float:
    return asyncio.get_running_loop().time() * 1000.0


async def run_play_loop(websocket: WebSocket, session: GameSession, frame_interval: float):
    """Run the render loop: one engine frame per interval, send changed snapshots."""
    session.running = True
    engine = session.engine
    try:
        while session.running and engine is not None and not engine.is_destroyed:
            engine.frame(_now_ms())

            state = engine.current_state()
            if state != session.last_sent:
                session.last_sent = state
                await websocket.send_json({"type": "state_update", "state": state})

                if engine.is_terminal:
                    await websocket.send_json({
                        "type": "game_over",
                        "state": state,
                        "final_score": state["score"],
                    })

            if session.completed and not session.completion_sent:
                session.completion_sent = True
                await websocket.send_json({"type": "complete", "final_score": state["score"]})

            await asyncio.sleep(frame_interval)
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception("Game loop error")
    finally:
        session.running = False


async def _send_bad_input(websocket: WebSocket, error: Exception):
    await websocket.send_json({"type": "error", "error": "invalid_input", "message": str(error)})


async def handle_message(websocket: WebSocket, session: GameSession, message: Any):
    if not isinstance(message, dict):
        await websocket.send_json({"type": "error", "error": "invalid_shape",
                                   "message": "Messages must be JSON objects"})
        return

    msg_type = message.get("type")

    if msg_type == "start_game":
        # Stop any existing game
        await session.stop()

        try:
            game = resolve_game(message.get("game") or {})
        except ConfigError as e:
            logger.warning("Not starting game: %s", e.message)
            await websocket.send_json({"type": "error", **e.to_dict()})
            return

        seed = message.get("seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            await _send_bad_input(websocket, TypeError(f"seed must be an integer, got {seed!r}"))
            return

        engine = session.start(game, seed, _now_ms())
        await websocket.send_json({
            "type": "state_update",
            "state": engine.current_state(),
            "title": game.title,
            "description": game.description,
            "instructions": game.config.instructions,
        })
        session.game_task = asyncio.create_task(
            run_play_loop(websocket, session, session.settings.frame_interval_ms / 1000.0)
        )

    elif msg_type == "key" and session.engine and session.mapper:
        try:
            intent = session.mapper.map_key(message.get("code", message.get("key", "")))
        except (TypeError, ValueError, AttributeError) as e:
            await _send_bad_input(websocket, e)
            return
        if intent is not None:
            session.engine.submit_intent(intent)

    elif msg_type == "pointer" and session.engine and session.mapper:
        try:
            intent = session.mapper.map_pointer(
                str(message.get("phase", "")), message.get("x", 0), message.get("y", 0)
            )
        except (TypeError, ValueError, AttributeError) as e:
            await _send_bad_input(websocket, e)
            return
        if intent is not None:
            session.engine.submit_intent(intent)

    elif msg_type == "restart" and session.engine:
        session.engine.restart()

    elif msg_type == "stop":
        await session.stop()


@app.websocket("/ws/game")
async def websocket_game(websocket: WebSocket):
    """WebSocket endpoint for real-time game communication."""
    await websocket.accept()

    session = GameSession()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "error": "invalid_json",
                                           "message": "Messages must be JSON"})
                continue

            await handle_message(websocket, session, message)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error")
    finally:
        await session.stop()


# Mount static files (after all routes)
if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


def find_available_port(start_port: int = 8000, max_attempts: int = 100) -> int:
    """Find an available port starting from start_port.

    Args:
        start_port: Port number to start searching from
        max_attempts: Maximum number of ports to try

    Returns:
        An available port number

    Raises:
        RuntimeError: If no available port is found
    """
    import socket

    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("0.0.0.0", port))
                return port
        except OSError:
            continue

    raise RuntimeError(f"No available port found in range {start_port}-{start_port + max_attempts - 1}")


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    default_port = 8000
    port = int(os.environ.get("PORT", 0)) or find_available_port(default_port)

    if port != default_port:
        logger.info("Port %d is in use, using port %d instead", default_port, port)

    host = os.environ.get("HOST", "0.0.0.0")
    logger.info("Starting server at http://localhost:%d", port)
    uvicorn.run(app, host=host, port=port)
