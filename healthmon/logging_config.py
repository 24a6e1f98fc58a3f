"""
Logging configuration for the healthmon controller
"""

import logging
import logging.config
import re
from typing import Dict, Any


class SecretEnvFilter(logging.Filter):
    """Filter to redact OAuth client secrets from controller logs.

    Covers both shapes a secret can take in a log line: the raw
    ``clientSecret`` key of a HealthCheck document and the rendered
    ``OAUTH_CLIENT_SECRET`` env var of a synthesized Deployment.
    """

    # repr() switches to double quotes when the value holds a single quote
    _quoted = r"""(?:'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")"""
    _patterns = (
        re.compile(r"('clientSecret': )" + _quoted),
        re.compile(r"('OAUTH_CLIENT_SECRET', 'value': )" + _quoted),
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact secret values in place."""
        message = record.getMessage()
        if "clientSecret" in message or "OAUTH_CLIENT_SECRET" in message:
            for pattern in self._patterns:
                message = pattern.sub(r"\1'***'", message)
            record.msg = message
            record.args = None
        return True  # Never drop records, only redact


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration for the controller process."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_env_filter": {
                "()": SecretEnvFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "controller": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_env_filter"]
            }
        },
        "loggers": {
            "healthmon": {
                "handlers": ["controller"],
                "level": level,
                "propagate": False
            },
            # The client logs every request at DEBUG; keep it quiet
            "kubernetes": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "urllib3": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }
