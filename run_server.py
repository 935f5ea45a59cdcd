#!/usr/bin/env python3
"""
Forum API server
Serves the JSON API with uvicorn
"""
import logging
import sys

import uvicorn

from config import DEFAULT_HOST, DEFAULT_PORT, LOG_LEVEL, STORE_BACKEND, STORE_PATH

logger = logging.getLogger("run_server")


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting forum server on %s:%s (store: %s at %s)", DEFAULT_HOST, DEFAULT_PORT,
                STORE_BACKEND, STORE_PATH)
    logger.info("API docs at http://%s:%s/docs", DEFAULT_HOST, DEFAULT_PORT)

    try:
        # Import here so logging is configured before the store is opened
        from app import app

        uvicorn.run(
            app,
            host=DEFAULT_HOST,
            port=DEFAULT_PORT,
            reload=False,
            access_log=True
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Error starting server")
        sys.exit(1)


if __name__ == "__main__":
    main()
