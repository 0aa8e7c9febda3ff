"""
エラーハンドリングパッケージ
"""

from .exceptions import (
    GuideBillingError,
    InvalidDateError,
    ValidationError,
    ConfigurationError,
    FileProcessingError,
    EncodingDetectionError
)
from .error_handler import ErrorHandler

__all__ = [
    'GuideBillingError',
    'InvalidDateError',
    'ValidationError',
    'ConfigurationError',
    'FileProcessingError',
    'EncodingDetectionError',
    'ErrorHandler'
]
