"""Configuration module for carp_sensing."""

import os
import logging
from dotenv import find_dotenv, load_dotenv

# Load environment variables from a .env file in or above the working directory
load_dotenv(find_dotenv(usecwd=True))


class Config:
    """Runtime configuration for study execution."""

    # File paths (relative paths resolve against the working directory)
    DATA_DIR = os.getenv('CARP_DATA_DIR', os.path.join('.', 'data'))
    STUDY_DIR = os.getenv('CARP_STUDY_DIR', os.path.join('.', 'studies'))

    # Logging
    LOG_LEVEL = os.getenv('CARP_LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Study defaults
    DEFAULT_NAMESPACE = os.getenv('CARP_DEFAULT_NAMESPACE', 'carp')
    DEFAULT_DATA_FORMAT = 'carp'

    # File data manager
    FILE_BUFFER_SIZE = int(os.getenv('CARP_FILE_BUFFER_SIZE', 500 * 1000))  # bytes

    # Power awareness (battery percentage)
    LIGHT_SAMPLING_LEVEL = int(os.getenv('CARP_LIGHT_SAMPLING_LEVEL', 50))
    MINIMUM_SAMPLING_LEVEL = int(os.getenv('CARP_MINIMUM_SAMPLING_LEVEL', 30))
    NO_SAMPLING_LEVEL = int(os.getenv('CARP_NO_SAMPLING_LEVEL', 10))


def configure_logging(level: str = None):
    """Set up root logging for a host application."""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format=Config.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ]
    )
