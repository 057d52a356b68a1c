import uvicorn

from tactile_grid.config import HOST, LOG_FILE, LOG_LEVEL, PORT
from tactile_grid.logging_config import get_logger, setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from tactile_grid.app import app  # noqa: E402

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info(f"Starting tactile grid server on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
