"""Engine settings from the environment (.env).

The engine itself never calls validate_config() or setup_logging(): the
application embedding it calls both once at startup.
"""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("CAREWORK_LOG_LEVEL", "INFO").upper()

# "france" or "alsace-moselle" (two extra public holidays)
HOLIDAY_REGION = os.getenv("CAREWORK_HOLIDAY_REGION", "france").lower()

# Employees who habitually work public holidays get the reduced +60% rate
HABITUAL_HOLIDAY_WORK = os.getenv("CAREWORK_HABITUAL_HOLIDAY_WORK", "false").lower() in ("1", "true", "yes")

SUPPORTED_REGIONS = ("france", "alsace-moselle")

_logging_configured = False


def validate_config() -> None:
    problems = []
    if HOLIDAY_REGION not in SUPPORTED_REGIONS:
        problems.append(f"CAREWORK_HOLIDAY_REGION={HOLIDAY_REGION!r} (expected one of {', '.join(SUPPORTED_REGIONS)})")
    if not isinstance(logging.getLevelName(LOG_LEVEL), int):
        problems.append(f"CAREWORK_LOG_LEVEL={LOG_LEVEL!r}")

    if problems:
        raise RuntimeError(
            f"Invalid engine configuration: {'; '.join(problems)}. "
            "Please fix these in your .env file."
        )


def setup_logging():
    global _logging_configured
    if _logging_configured:
        return

    logger = logging.getLogger()
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)

        console = logging.StreamHandler()
        console.setLevel(LOG_LEVEL)
        console.setFormatter(logging.Formatter('%(name)-12s: %(levelname)-8s %(message)s'))
        logger.addHandler(console)

    _logging_configured = True
