# utils/logging_setup.py
import logging

from utils.settings import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Configure the root logger once per process.
    Streamlit re-runs the entry script on every interaction, so a second call is a no-op.
    """
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
