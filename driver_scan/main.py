"""Application entry point for the Driver Scan API server."""

import uvicorn

from driver_scan.api.app import app
from driver_scan.utils.config import load_config
from driver_scan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Start the FastAPI application server on the configured address."""
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Rule table: %s", config.matching.rules_path)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
