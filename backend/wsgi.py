from sketchparty.config import Config
from sketchparty.logging_utils import configure_logging
from sketchparty.server import create_app

configure_logging(Config.LOG_LEVEL)
app, socketio = create_app()
