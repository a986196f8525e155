import os


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # eventlet in production; the test client runs fine on threading
    SOCKETIO_ASYNC_MODE = os.getenv("SOCKETIO_ASYNC_MODE", "eventlet")
    # None -> bundled dicepot/data/rules.yml
    RULES_FILE = os.getenv("DICEPOT_RULES_FILE")
    # None -> OS entropy
    RANDOM_SEED = None


class DevConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-secret"
    SOCKETIO_ASYNC_MODE = "threading"
    RANDOM_SEED = 7
