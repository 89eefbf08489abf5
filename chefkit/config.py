"""Configuration for chefkit, read from the environment and a .env file."""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Load environment variables from .env file
DOTENV_FILE = find_dotenv(usecwd=True)
load_dotenv(DOTENV_FILE)

APP_NAME = "chefkit"

# Recipe files and collections
RECIPE_EXTENSION = "cook"
COOK_DIR = ".cooklang"

DEFAULT_MAX_DEPTH = 10

PATH_ENV = "CHEFKIT_PATH"
MAX_DEPTH_ENV = "CHEFKIT_MAX_DEPTH"


class ConfigError(Exception):
    """Exception raised for invalid configuration values."""

    pass


def get_base_path() -> Path:
    """Get the recipes directory from the environment, or the current directory."""
    path = os.getenv(PATH_ENV)
    if path:
        return Path(path).expanduser()
    return Path.cwd()


def get_max_depth() -> int:
    """Get the maximum directory depth to search for recipes."""
    value = os.getenv(MAX_DEPTH_ENV)
    if not value:
        return DEFAULT_MAX_DEPTH

    try:
        depth = int(value)
    except ValueError as e:
        raise ConfigError(f"{MAX_DEPTH_ENV} must be an integer, got '{value}'") from e

    if depth < 0:
        raise ConfigError(f"{MAX_DEPTH_ENV} must not be negative, got {depth}")
    return depth


def is_collection(path: Path) -> bool:
    """Check if a directory is a recipe collection (has a .cooklang dir)."""
    return (path / COOK_DIR).is_dir()
