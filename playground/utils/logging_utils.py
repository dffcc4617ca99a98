import logging
import os

# This module provides a consistent logging interface for the application

def get_logger():
   # Create and configure the logger
   logger = logging.getLogger("playground")

   # Remove any existing handlers
   logger.handlers.clear()

   # Prevent propagation to the root logger to avoid duplicate logs
   logger.propagate = False

   formatter = logging.Formatter("\033[36mPLAYGROUND\033[0m: %(levelname)-8s %(message)s")
   handler = logging.StreamHandler()
   handler.setFormatter(formatter)
   logger.addHandler(handler)

   # Set level from environment or default to INFO
   logger.setLevel(os.environ.get('PLAYGROUND_LOG_LEVEL', 'INFO').upper())
   return logger

def configure_third_party_logging():
   """Suppress verbose logging from third-party libraries"""
   logging.getLogger('asyncio').setLevel(logging.WARNING)

   if os.environ.get('PLAYGROUND_LOG_LEVEL', 'INFO').upper() != 'DEBUG':
       logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
       logging.getLogger('httpx').setLevel(logging.WARNING)
       logging.getLogger('httpcore').setLevel(logging.WARNING)

logger = get_logger()
configure_third_party_logging()
