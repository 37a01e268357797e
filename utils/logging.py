import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole app.
    Call this once at startup (run.py / FastAPI lifespan) before handling requests.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
