import logging
import os

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(module)s - %(message)s"

# Shared application logger; handlers live on the root logger (see setup_logging)
logger = logging.getLogger("Zorgscan")


def setup_logging(log_cfg: dict) -> None:
    """
    Configure the root logger from the `logging` config section.
    Called once by app.main; repeated calls replace the handlers instead of stacking them.
    """
    handlers = []
    log_file = log_cfg.get("log_file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    if log_cfg.get("use_stream_handler", True) or not handlers:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=log_cfg.get("level", "INFO").upper(),
        format=log_cfg.get("format", DEFAULT_FORMAT),
        handlers=handlers,
        force=True,
    )
