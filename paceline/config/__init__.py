"""Configuration, logging and calibration data for PaceLine."""

from .calibration import CalibrationTables, DEFAULT_CALIBRATION
from .config import get_config
from .logging_config import get_logger, setup_logging

__all__ = ['CalibrationTables', 'DEFAULT_CALIBRATION', 'get_config', 'get_logger', 'setup_logging']
