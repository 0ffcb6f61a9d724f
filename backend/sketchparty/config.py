import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO runtime ("" picks eventlet or threading by platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Profile store
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///sketchparty.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STARTING_COINS = int(os.environ.get("STARTING_COINS", "100"))

    # Game
    ROUND_DURATION_SEC = int(os.environ.get("ROUND_DURATION_SEC", "60"))
    TOTAL_ROUNDS = int(os.environ.get("TOTAL_ROUNDS", "10"))
    ROUND_END_DELAY_SEC = int(os.environ.get("ROUND_END_DELAY_SEC", "5"))
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "1"))
    ROOM_CAPACITY = int(os.environ.get("ROOM_CAPACITY", "8"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))
