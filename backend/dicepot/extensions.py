from flask_cors import CORS
from flask_socketio import SocketIO

cors = CORS()
# async_mode is chosen per app in create_app (config SOCKETIO_ASYNC_MODE)
socketio = SocketIO()
