import os
import logging
import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

if os.environ.get("DEBUG", "0") == "1":
    logging.getLogger().setLevel(logging.DEBUG)

from api import create_app
from config import get_config

config = get_config()
app = create_app()

if __name__ == "__main__":
    logger.info(f"Starting SIM gateway on {config.host}:{config.port} (infra={config.infra})")
    if not config.gateway_tokens:
        logger.warning("GATEWAY_TOKEN is not set; all authenticated routes will reject requests")
    uvicorn.run(app, host=config.host, port=config.port)
