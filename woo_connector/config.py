import logging
import os
import sys

__version__ = "3.0.0"

SERVICE_NAME = "woocommerce-connector"


def env(name: str, default: str = "") -> str:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip()


def env_int(name: str, default: int) -> int:
    raw = env(name, "")
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = env(name, "").lower()
    if raw == "":
        return default
    return raw in ("1", "true", "yes", "y", "on")


def setup_logging(level: str = "INFO") -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # avoid duplicate handlers on reload
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)


# WooCommerce defaults (credentials are read per client, never at import time)
DEFAULT_VERSION = "wc/v3"
DEFAULT_TIMEOUT = 5
USER_AGENT = f"WooCommerce-Python-REST-API/{__version__}"

LOG_LEVEL = env("LOG_LEVEL", "INFO")
