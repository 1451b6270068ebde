# utils/logger.py
import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}::{function}:{line}</>",
        "{message}",
    )
)

# Replace the default sink so every module shares one format
logger.remove()
logger.add(sys.stdout, format=log_format, level=LOG_LEVEL)
