"""Dice pot game server – entry point
===================================

Runs the Socket.IO server (eventlet by default) on ``$HOST:$PORT``.
Needs the package installed (``pip install -e .``).
Rooms live in memory only; restarting the process drops every game.
"""

import os

from dicepot import create_app
from dicepot.config import BaseConfig, DevConfig
from dicepot.extensions import socketio

config = DevConfig if os.getenv("FLASK_DEBUG") == "1" else BaseConfig
app = create_app(config)

if __name__ == "__main__":
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )
