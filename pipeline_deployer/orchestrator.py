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
Main orchestrator for deploying the pipeline stack.
"""

import logging
from typing import Callable, List, Optional

import yaml

from .data_models import DeploymentReport, RunConfig, StackInputs, StepResult, StepStatus
from .deployer import StackDeployer
from .error_handling import ParamsFileException, TemplateValidationException
from .params_extractor import ParameterExtractor
from .pipeline_trigger import PipelineTrigger
from .preflight import PreflightAuditor
from .reporter import StackReporter
from .template_loader import TemplateInspector
from .template_validator import TemplateValidator

logger = logging.getLogger(__name__)

VALIDATE_STEP = "Validate template"
EXTRACT_STEP = "Read parameters and tags"


class PipelineStackDeployer:
    """Runs the full validate, extract, preflight, deploy and report sequence."""

    def __init__(self, config: RunConfig, session, echo: Optional[Callable[[str], None]] = None):
        """Initialize the deployer.

        Args:
            config: Resolved run configuration.
            session: boto3 session that passed the precondition checks.
            echo: Callable used for operator-facing progress lines. Defaults to print.
        """
        self.config = config
        self.session = session
        self.echo = echo or print

        self.cf_client = session.client('cloudformation', region_name=config.region)
        self.s3_client = session.client('s3', region_name=config.region)
        self.connections_client = session.client('codestar-connections', region_name=config.region)
        self.codepipeline_client = session.client('codepipeline', region_name=config.region)

        self.validator = TemplateValidator(self.cf_client)
        self.extractor = ParameterExtractor(config.params_path)
        self.auditor = PreflightAuditor(self.s3_client, self.connections_client)
        self.stack_deployer = StackDeployer(self.cf_client, config)
        self.reporter = StackReporter(self.cf_client, config.stack_name)
        self.trigger = PipelineTrigger(self.codepipeline_client)

    def _record(self, report: DeploymentReport, result: StepResult) -> StepResult:
        report.add(result)
        if result.status in (StepStatus.WARNING, StepStatus.FAILED):
            self.echo(f"!! Warning: {result.message}")
        return result

    def print_configuration(self) -> None:
        self.echo(f"Region        : {self.config.region}")
        self.echo(f"Stack name    : {self.config.stack_name}")
        self.echo(f"Template file : {self.config.template_path}")
        self.echo(f"Params file   : {self.config.params_path}")
        self.echo(f"Profile       : {self.config.profile_label}")
        self.echo("")

    def _template_parameter_keys(self, validated_keys: Optional[List[str]]) -> Optional[List[str]]:
        if validated_keys is not None:
            return validated_keys
        try:
            return TemplateInspector(self.config.template_path).parameter_keys()
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.debug(f"Template parameters unavailable locally: {e}")
            return None

    def run(self) -> DeploymentReport:
        """Run the deployment and return the aggregated report.

        Template validation and params-file failures stop the run with exit
        code 1. Every later failure is recorded and the run continues.
        """
        report = DeploymentReport(config=self.config)
        self.print_configuration()

        validated_keys = None
        if self.config.validate:
            self.echo(">> Validating CloudFormation template...")
            try:
                validated_keys = self.validator.validate(self.config.template_path)
            except TemplateValidationException as e:
                logger.error(str(e))
                report.add(StepResult(VALIDATE_STEP, StepStatus.FAILED, str(e),
                                      details={'error_code': e.error_code}))
                report.exit_code = 1
                return report
            report.add(StepResult(VALIDATE_STEP, StepStatus.SUCCESS, "Template is valid"))
            self.echo("OK")
            self.echo("")
        else:
            report.add(StepResult(VALIDATE_STEP, StepStatus.SKIPPED, "--no-validate given"))

        self.echo(">> Reading parameters and tags from JSON...")
        try:
            inputs = self.extractor.extract()
        except ParamsFileException as e:
            logger.error(str(e))
            report.add(StepResult(EXTRACT_STEP, StepStatus.FAILED, str(e)))
            report.exit_code = 1
            return report
        report.add(StepResult(EXTRACT_STEP, StepStatus.SUCCESS,
                              f"{len(inputs.parameter_overrides)} parameters, {len(inputs.tag_overrides)} tags"))

        self.run_preflight(report, inputs)

        self.echo(f">> Deploying stack {self.config.stack_name} ...")
        self._record(report, self.stack_deployer.deploy(
            inputs, self._template_parameter_keys(validated_keys)))

        if inputs.tag_overrides:
            self.echo(">> Applying stack tags...")
        self._record(report, self.stack_deployer.apply_tags(inputs))

        self.echo(">> Waiting for stack to complete...")
        self._record(report, self.stack_deployer.wait_for_completion())

        self.echo("")
        self.echo("=== Stack outputs ===")
        result, outputs = self.reporter.report()
        self._record(report, result)
        report.outputs = outputs
        report.stack_status = result.details.get('stack_status')
        for line in self.reporter.render(outputs):
            self.echo(line)
        self.echo("")

        if self.config.run_pipeline:
            self.start_pipeline(report, inputs)

        logger.info("Deployment run complete")
        return report

    def run_preflight(self, report: DeploymentReport, inputs: StackInputs) -> None:
        """Best-effort checks of the bucket, connection and template parameters."""
        if inputs.artifact_bucket:
            self.echo(f">> Checking artifact bucket exists: {inputs.artifact_bucket}")
            self._record(report, self.auditor.check_artifact_bucket(inputs.artifact_bucket))

        if inputs.connection_arn:
            self.echo(">> Checking CodeStar/CodeConnections status...")
            result = self.auditor.check_connection(inputs.connection_arn)
            self.echo(f"Connection status: {result.details.get('connection_status')}")
            self._record(report, result)

        self._record(report, self.auditor.audit_template_parameters(self.config.template_path, inputs))
        self.echo("")

    def start_pipeline(self, report: DeploymentReport, inputs: StackInputs) -> None:
        result = self.trigger.start(inputs.pipeline_name)
        if result.status == StepStatus.SKIPPED:
            self.echo(f">> {result.message}")
            report.add(result)
            return

        self.echo(f">> Starting pipeline execution: {inputs.pipeline_name}")
        self._record(report, result)
        execution_id = result.details.get('execution_id')
        if execution_id:
            report.pipeline_execution_id = execution_id
            self.echo(execution_id)
