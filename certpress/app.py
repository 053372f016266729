import logging
import os
import sys
from typing import Any, Mapping

from flask import Flask

from .shared.locales import normalize_locale
from .shared.typefaces import TypefaceRegistry


def _configure_logging(level_name: str) -> None:
    logger = logging.getLogger("certpress")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))


def create_app(config: Mapping[str, Any] | None = None):
    app = Flask(__name__)

    storage_root = os.getenv("STORAGE_ROOT", os.path.abspath("storage"))
    app.config["STORAGE_ROOT"] = storage_root
    app.config["TYPEFACE_DIR"] = os.getenv(
        "TYPEFACE_DIR", os.path.join(storage_root, "typefaces")
    )
    app.config["PUBLIC_BASE_URL"] = os.getenv(
        "PUBLIC_BASE_URL", "http://localhost:3000"
    )
    app.config["DEFAULT_LOCALE"] = os.getenv("DEFAULT_LOCALE", "en-US")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    if config:
        app.config.update(config)
        if "STORAGE_ROOT" in config and "TYPEFACE_DIR" not in config:
            app.config["TYPEFACE_DIR"] = os.path.join(
                config["STORAGE_ROOT"], "typefaces"
            )
    app.config["DEFAULT_LOCALE"] = normalize_locale(app.config["DEFAULT_LOCALE"])

    _configure_logging(app.config["LOG_LEVEL"])
    app.logger.setLevel(logging.getLogger("certpress").level)
    return app


def storage_path(app: Flask, *parts: str) -> str:
    return os.path.join(app.config["STORAGE_ROOT"], *parts)


def load_typefaces(app: Flask) -> TypefaceRegistry:
    """Read the typeface directory; a fresh registry per call."""
    return TypefaceRegistry.from_directory(app.config["TYPEFACE_DIR"])
