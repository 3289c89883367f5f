import logging
import sys

import uvicorn

from taskmaster.reminders.config import get_settings
from taskmaster.reminders.service import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    logger.info("Starting Task Master reminder service on %s:%s", settings.SERVICE_HOST, settings.SERVICE_PORT)
    uvicorn.run(app, host=settings.SERVICE_HOST, port=settings.SERVICE_PORT)
