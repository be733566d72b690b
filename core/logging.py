"""
Custom logging utilities and handlers for the Firebase Messaging backend
"""

import os
import logging.handlers
from pathlib import Path


class AutoCreateRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    A rotating file handler that automatically creates the directory structure
    and sets proper permissions for log files.
    """

    def __init__(self, filename, mode='a', maxBytes=0, backupCount=0, encoding=None, delay=False, errors=None):
        log_dir = Path(filename).parent

        # Create directory with proper permissions if it doesn't exist
        if not log_dir.exists():
            log_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(log_dir, 0o755)

        super().__init__(filename, mode, maxBytes, backupCount, encoding, delay, errors)

        if os.path.exists(filename):
            os.chmod(filename, 0o644)


def mask_token(token, visible=20):
    """Shorten a device token for log output"""
    if not token:
        return ''
    token = str(token)
    if len(token) <= visible:
        return token
    return f"{token[:visible]}..."
