# MIT No Attribution
#
# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of
# this software and associated documentation files (the "Software"), to deal in
# the Software without restriction, including without limitation the rights to
# use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of
# the Software, and to permit persons to whom the Software is furnished to do so.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS
# FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR
# COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER
# IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.

"""
Error handling utilities for the pipeline stack deployer.
"""

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .config import CONFIG
from .data_models import ErrorResponse

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling for AWS and file errors."""

    @staticmethod
    def handle_aws_error(error: Exception, context: str = "") -> ErrorResponse:
        """Handle AWS API errors with detailed information."""
        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code', 'Unknown')
            error_message = error.response.get('Error', {}).get('Message', str(error))
        elif isinstance(error, BotoCoreError):
            error_code = type(error).__name__
            error_message = str(error)
        else:
            error_code = type(error).__name__
            error_message = str(error)

        logger.debug(f"AWS API Error in {context}: {error_code} - {error_message}")

        return ErrorResponse(
            error_type="AWS_API_ERROR",
            error_code=error_code,
            message=error_message,
            details=f"Context: {context}" if context else None
        )

    @staticmethod
    def handle_file_error(error: Exception, file_path: str, operation: str) -> ErrorResponse:
        """Handle file system errors with path information."""
        logger.error(f"File {operation} error for {file_path}: {str(error)}")

        return ErrorResponse(
            error_type="FILE_ERROR",
            error_code=type(error).__name__,
            message=f"Failed to {operation} file: {file_path}",
            details=str(error)
        )

    @staticmethod
    def error_message(error: Exception) -> str:
        """Short 'Code: Message' form of an AWS error."""
        if isinstance(error, ClientError):
            err = error.response.get('Error', {})
            return f"{err.get('Code', 'Unknown')}: {err.get('Message', str(error))}"
        return str(error)

    @staticmethod
    def is_no_update_error(error: Exception) -> bool:
        """Whether CloudFormation rejected an update because nothing changed."""
        return isinstance(error, ClientError) and CONFIG['no_updates_message'] in str(error)

    @staticmethod
    def is_missing_stack_error(error: Exception) -> bool:
        """Whether CloudFormation reported the stack as nonexistent."""
        return isinstance(error, ClientError) and CONFIG['missing_stack_message'] in str(error)


class PreconditionException(Exception):
    """Raised when a required tool or input file is unavailable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class TemplateValidationException(Exception):
    """Raised when CloudFormation rejects the template."""

    def __init__(self, message: str, template_path: Optional[str] = None,
                 error_code: Optional[str] = None):
        super().__init__(message)
        self.template_path = template_path
        self.error_code = error_code


class ParamsFileException(Exception):
    """Raised when the parameters JSON file cannot be read or parsed."""

    def __init__(self, message: str, params_path: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message)
        self.params_path = params_path
        self.details = details
