"""
Call Scorecard Worker.

Entry point for one pipeline stage; ``PIPELINE_STAGE`` selects which.
"""

from ddtrace import patch_all

from call_scorecard.config import load_config
from call_scorecard.dependencies import get_worker
from call_scorecard.logging import setup_logging

logger = setup_logging()
patch_all()


def main():
    """Loads configuration and starts the stage worker."""
    config = load_config()
    logger.info("Starting call-scorecard worker", extra={"stage": config.stage.name})
    worker = get_worker(config)
    worker.start()


if __name__ == "__main__":
    main()
