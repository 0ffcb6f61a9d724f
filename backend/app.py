import os

import sys

from pathlib import Path

from dotenv import load_dotenv


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if (
        not sys.platform.startswith("win")
        and sys.version_info < (3, 13)
        and env_async_mode in ("", "eventlet")
    ):
        import eventlet

        eventlet.monkey_patch()

    from sketchparty.config import Config
    from sketchparty.logging_utils import configure_logging
    from sketchparty.server import create_app

    configure_logging(Config.LOG_LEVEL)
    app, socketio = create_app()

    # The threading fallback serves through Werkzeug's dev server.
    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
        allow_unsafe_werkzeug=socketio.async_mode == "threading",
    )


if __name__ == "__main__":
    main()
