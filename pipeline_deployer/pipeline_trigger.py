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
Optional start of a CodePipeline execution after deployment.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from .data_models import StepResult, StepStatus
from .error_handling import ErrorHandler

logger = logging.getLogger(__name__)

PIPELINE_STEP = "Start pipeline"


class PipelineTrigger:
    """Starts executions of the deployed pipeline."""

    def __init__(self, codepipeline_client):
        self.codepipeline_client = codepipeline_client

    def start(self, pipeline_name: str) -> StepResult:
        """Start an execution, skipping when no pipeline name is known."""
        if not pipeline_name or pipeline_name == "null":
            logger.info("No PipelineName available, skipping pipeline start")
            return StepResult(PIPELINE_STEP, StepStatus.SKIPPED,
                              "Could not read PipelineName from params file; skipping start")

        logger.info(f"Starting pipeline execution: {pipeline_name}")
        try:
            response = self.codepipeline_client.start_pipeline_execution(name=pipeline_name)
        except (ClientError, BotoCoreError) as e:
            message = ErrorHandler.error_message(e)
            logger.warning(f"Failed to start pipeline {pipeline_name}: {message}")
            return StepResult(PIPELINE_STEP, StepStatus.FAILED, message,
                              details={'pipeline_name': pipeline_name})

        execution_id = response.get('pipelineExecutionId')
        logger.info(f"Pipeline execution started: {execution_id}")
        return StepResult(PIPELINE_STEP, StepStatus.SUCCESS, f"Execution {execution_id}",
                          details={'pipeline_name': pipeline_name, 'execution_id': execution_id})
