#!/usr/bin/env python3
"""
Standalone script to run the Friendships API.
This script can be used to start the server directly.
"""

import os
import sys
import logging
import uvicorn

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from friends_api.core.config import settings

def main():
    """Main entry point for the application."""

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger = logging.getLogger(__name__)

    logger.info("Starting Friendships API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Host: {settings.API_HOST}")
    logger.info(f"Port: {settings.API_PORT}")

    try:
        # Run the application
        uvicorn.run(
            "friends_api.main:app",
            host=settings.API_HOST,
            port=settings.API_PORT,
            reload=settings.is_development and settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True
        )

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
