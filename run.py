"""
Run the onboarding API with uvicorn.
Usage: python3 run.py   (from the project root; HOST/PORT/DEBUG come from the environment or .env)
"""
import uvicorn

from config import settings
from utils.logging import configure_logging

if __name__ == "__main__":
    configure_logging(settings.log_level)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
