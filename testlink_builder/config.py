import json
import logging
import os
from dataclasses import dataclass

from .errors import InvalidInstallationError

# Configuration globale
TESTLINK_URL = os.environ.get(
    "TESTLINK_URL", "http://localhost/testlink/testlink-1.9.20/lib/api/xmlrpc/v1/xmlrpc.php"
)
TESTLINK_DEVKEY = os.environ.get("TESTLINK_DEVKEY", "")
TESTLINK_INSTALLATIONS_FILE = os.environ.get("TESTLINK_INSTALLATIONS_FILE")

DB_CONFIG = {
    'dbname': os.environ.get("TESTLINK_BUILDER_DB_NAME", "testlink_db"),
    'user': os.environ.get("TESTLINK_BUILDER_DB_USER", "postgres"),
    'password': os.environ.get("TESTLINK_BUILDER_DB_PASSWORD", ""),
    'host': os.environ.get("TESTLINK_BUILDER_DB_HOST", "localhost"),
    'port': os.environ.get("TESTLINK_BUILDER_DB_PORT", "5432"),
}

LOG_LEVEL = os.environ.get("TESTLINK_BUILDER_LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

BUILD_NOTES = "Build created automatically by the TestLink build step"


@dataclass
class TestLinkInstallation:
    name: str
    url: str
    devkey: str


def load_installations(path=None):
    """Installations TestLink déclarées, par nom."""
    path = path or TESTLINK_INSTALLATIONS_FILE
    if not path:
        return {"default": TestLinkInstallation("default", TESTLINK_URL, TESTLINK_DEVKEY)}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return {
            item["name"]: TestLinkInstallation(item["name"], item["url"], item.get("devkey", ""))
            for item in data
        }
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise InvalidInstallationError(f"Invalid TestLink installations file {path}: {e}") from e


def get_installation(name, installations=None):
    if installations is None:
        installations = load_installations()
    return installations.get(name)


def setup_logging(level=None):
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
