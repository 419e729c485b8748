# logging_setup.py
import logging
import os
from datetime import datetime
from config import LOG_LEVEL, LOG_FILE, LOG_DIR

# Fields attached through ``extra=`` by the extractor's strategy events
EVENT_FIELDS = ('event', 'strategy', 'outcome', 'score', 'duration_ms')


class EventFormatter(logging.Formatter):
    """Formatter that appends structured event fields as key=value pairs"""

    def format(self, record):
        message = super().format(record)
        fields = [
            f"{name}={getattr(record, name)}"
            for name in EVENT_FIELDS
            if getattr(record, name, None) is not None
        ]
        if fields:
            message = f"{message} [{' '.join(fields)}]"
        return message


def setup_logging(log_to_file=False):
    """
    Set up logging configuration

    Args:
        log_to_file (bool): Also write a timestamped log file under LOG_DIR

    Returns:
        logging.Logger: Logger for the calling module
    """
    formatter = EventFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = [logging.StreamHandler()]

    if log_to_file:
        # Create logs directory if it doesn't exist
        if not os.path.exists(LOG_DIR):
            os.makedirs(LOG_DIR)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        handlers.append(logging.FileHandler(f"{LOG_DIR}/{timestamp}_{LOG_FILE}"))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        handlers=handlers,
        force=True
    )

    # Set specific log levels for noisy libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('chardet').setLevel(logging.WARNING)

    return logging.getLogger(__name__)
