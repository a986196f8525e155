import random

from flask import Flask

from .config import DevConfig
from .core.loader import load_rules
from .extensions import cors, socketio
from .infrastructure.memory.repo import InMemoryRoomStore
from .logging_config import setup_logging
from .services.game_service import GameService
from .sockets import register_socket_events


def create_app(config_object=DevConfig):
    app = Flask(__name__)
    app.config.from_object(config_object)
    setup_logging(app.config["LOG_LEVEL"])

    # ── game service (one room store per app) ─────────────────
    rules = load_rules(app.config.get("RULES_FILE"))
    app.extensions["dicepot"] = GameService(
        store=InMemoryRoomStore(),
        rules=rules,
        rng=random.Random(app.config.get("RANDOM_SEED")),
    )

    # ── socket events ──────────────────────────────────────────
    # before init_app: handlers added while no server exists are replayed
    # onto every server init_app creates
    register_socket_events(socketio)

    # ── extensions ─────────────────────────────────────────────
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    socketio.init_app(
        app,
        cors_allowed_origins="*",
        async_mode=app.config["SOCKETIO_ASYNC_MODE"],
    )
    return app
