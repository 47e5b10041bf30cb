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
Server-side CloudFormation template validation.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from .error_handling import ErrorHandler, TemplateValidationException

logger = logging.getLogger(__name__)


def read_template_body(template_path: str) -> str:
    """Read the raw template text sent to CloudFormation."""
    return Path(template_path).read_text(encoding='utf-8')


class TemplateValidator:
    """Runs ValidateTemplate against CloudFormation."""

    def __init__(self, cf_client):
        """Initialize the validator.

        Args:
            cf_client: boto3 CloudFormation client.
        """
        self.cf_client = cf_client

    def validate(self, template_path: str) -> List[str]:
        """Validate the template and return its declared parameter keys.

        Raises:
            TemplateValidationException: If CloudFormation rejects the template
                or the call itself fails.
        """
        logger.info(f"Validating CloudFormation template: {template_path}")

        try:
            response: Dict[str, Any] = self.cf_client.validate_template(
                TemplateBody=read_template_body(template_path)
            )
        except (ClientError, BotoCoreError) as e:
            error = ErrorHandler.handle_aws_error(e, "validate-template")
            raise TemplateValidationException(
                f"Template validation failed: {error.message}",
                template_path=template_path,
                error_code=error.error_code
            ) from e

        parameter_keys = [p['ParameterKey'] for p in response.get('Parameters', [])]
        logger.debug(f"Template declares parameters: {parameter_keys}")
        if response.get('Capabilities'):
            logger.debug(f"Template requires capabilities: {response['Capabilities']}")
        return parameter_keys
