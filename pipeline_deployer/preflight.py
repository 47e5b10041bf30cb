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
Best-effort preflight checks. Nothing here ever blocks a deployment.
"""

import logging

import yaml
from botocore.exceptions import BotoCoreError, ClientError

from .config import CONFIG
from .data_models import StackInputs, StepResult, StepStatus
from .error_handling import ErrorHandler
from .template_loader import TemplateInspector

logger = logging.getLogger(__name__)

BUCKET_STEP = "Artifact bucket check"
CONNECTION_STEP = "Source connection check"
TEMPLATE_PARAMS_STEP = "Template parameter audit"


class PreflightAuditor:
    """Checks external resources the pipeline stack depends on."""

    def __init__(self, s3_client, connections_client):
        """Initialize the auditor.

        Args:
            s3_client: boto3 S3 client.
            connections_client: boto3 CodeStar Connections client.
        """
        self.s3_client = s3_client
        self.connections_client = connections_client

    def check_artifact_bucket(self, bucket_name: str) -> StepResult:
        """Check the artifact bucket exists and is reachable."""
        if not bucket_name:
            return StepResult(BUCKET_STEP, StepStatus.SKIPPED, "No ArtifactBucketName in params file")

        try:
            self.s3_client.head_bucket(Bucket=bucket_name)
        except (ClientError, BotoCoreError) as e:
            error = ErrorHandler.handle_aws_error(e, "head-bucket")
            logger.warning(f"Artifact bucket {bucket_name} not accessible: {error}")
            return StepResult(
                BUCKET_STEP, StepStatus.WARNING,
                f"Artifact bucket not found or not accessible: {bucket_name}",
                details={'bucket': bucket_name, 'error_code': error.error_code}
            )

        logger.info(f"Artifact bucket reachable: {bucket_name}")
        return StepResult(BUCKET_STEP, StepStatus.SUCCESS, bucket_name, details={'bucket': bucket_name})

    def get_connection_status(self, connection_arn: str) -> str:
        """Return the connection status, or the unknown sentinel on any error."""
        try:
            response = self.connections_client.get_connection(ConnectionArn=connection_arn)
        except (ClientError, BotoCoreError) as e:
            error = ErrorHandler.handle_aws_error(e, "get-connection")
            logger.warning(f"Could not read connection status: {error}")
            return CONFIG['connection_unknown_status']

        return response.get('Connection', {}).get('ConnectionStatus') or CONFIG['connection_unknown_status']

    def check_connection(self, connection_arn: str) -> StepResult:
        """Check the source connection has been authorized."""
        if not connection_arn:
            return StepResult(CONNECTION_STEP, StepStatus.SKIPPED, "No ConnectionArn in params file")

        status = self.get_connection_status(connection_arn)
        details = {'connection_arn': connection_arn, 'connection_status': status}

        if status != CONFIG['connection_available_status']:
            return StepResult(
                CONNECTION_STEP, StepStatus.WARNING,
                f"Connection is {status}, not {CONFIG['connection_available_status']}. "
                "If PENDING, open AWS Console -> Developer Tools -> Connections and click Authorize/Update.",
                details=details
            )
        return StepResult(CONNECTION_STEP, StepStatus.SUCCESS, f"Connection status: {status}", details=details)

    def audit_template_parameters(self, template_path: str, inputs: StackInputs) -> StepResult:
        """Compare parameter overrides with the parameters the template declares."""
        try:
            inspector = TemplateInspector(template_path)
            declared = inspector.parameter_keys()
            required = inspector.required_parameter_keys()
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Could not parse template {template_path}: {e}")
            return StepResult(TEMPLATE_PARAMS_STEP, StepStatus.WARNING,
                              f"Template could not be parsed locally: {e}")

        supplied = [key for key, _ in inputs.parameter_overrides]
        undeclared = [key for key in supplied if key not in declared]
        missing = [key for key in required if key not in supplied]
        details = {'undeclared': undeclared, 'missing': missing}

        problems = []
        if undeclared:
            problems.append(f"not declared in template: {', '.join(undeclared)}")
        if missing:
            problems.append(f"no value and no Default: {', '.join(missing)}")

        if problems:
            return StepResult(TEMPLATE_PARAMS_STEP, StepStatus.WARNING,
                              "Parameters " + "; ".join(problems), details=details)
        return StepResult(TEMPLATE_PARAMS_STEP, StepStatus.SUCCESS,
                          f"{len(supplied)} overrides match template", details=details)
