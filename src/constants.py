"""Constants used in the project."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MAVEN_CENTRAL_ID = "central"
    MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"
    SPRING_MILESTONE_URL = "https://repo.spring.io/milestone"
    SNAPSHOT_SUFFIX = "-SNAPSHOT"
    POM_XML_FILE = "pom.xml"
    POM_EXTENSION = "pom"
    JAR_EXTENSION = "jar"
    METADATA_FILE = "maven-metadata.xml"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "GAVRESOLVE_LOG_LEVEL"
    ENV_CONFIG = "GAVRESOLVE_CONFIG"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    MAX_WORKERS = 8
    USER_AGENT = "gavresolve/0.1"


# YAML keys that may override Constants, mapped to attribute names.
_CONFIG_KEYS = {
    "request_timeout": "REQUEST_TIMEOUT",
    "http_retry_max": "HTTP_RETRY_MAX",
    "http_retry_delay_sec": "HTTP_RETRY_BASE_DELAY_SEC",
    "max_workers": "MAX_WORKERS",
    "maven_central_url": "MAVEN_CENTRAL_URL",
}


def _default_config_paths():
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        yield env_path
    yield os.path.join(os.getcwd(), "gavresolve.yml")
    yield os.path.join(os.path.expanduser("~"), ".config", "gavresolve", "config.yml")


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Return the first YAML config found, or an empty dict."""
    candidates = [path] if path else list(_default_config_paths())
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Apply YAML overrides to Constants and return the raw config mapping.

    Unknown keys are left in the returned mapping for the caller; known keys
    replace the matching Constants attribute.
    """
    data = _load_yaml_config(path)
    for key, attr in _CONFIG_KEYS.items():
        if key not in data or data[key] is None:
            continue
        current = getattr(Constants, attr)
        try:
            value = type(current)(data[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring config value %s=%r", key, data[key])
            continue
        setattr(Constants, attr, value)
    return data
