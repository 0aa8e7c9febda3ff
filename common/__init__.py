"""
共通コンポーネントパッケージ
"""

from .file_handlers.csv_handler import CSVHandler
from .error_handling.exceptions import (
    GuideBillingError,
    InvalidDateError,
    ValidationError,
    ConfigurationError,
    FileProcessingError,
    EncodingDetectionError
)
from .error_handling.error_handler import ErrorHandler
from .logging.unified_logger import UnifiedLogger
from .config.config_manager import ConfigManager
from .utils.encoding_detector import EncodingDetector
from .data_models import (
    ProcessingResult,
    ProcessingSummary
)

__all__ = [
    'CSVHandler',
    'GuideBillingError',
    'InvalidDateError',
    'ValidationError',
    'ConfigurationError',
    'FileProcessingError',
    'EncodingDetectionError',
    'ErrorHandler',
    'UnifiedLogger',
    'ConfigManager',
    'EncodingDetector',
    'ProcessingResult',
    'ProcessingSummary'
]
