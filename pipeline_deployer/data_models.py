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
Data models for the pipeline stack deployment run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RunConfig:
    """Resolved configuration for a single deployment run."""
    region: str
    stack_name: str
    template_path: str
    params_path: str
    profile: Optional[str] = None
    validate: bool = True
    run_pipeline: bool = False

    @property
    def profile_label(self) -> str:
        """Profile name for display, empty when using default credentials."""
        return self.profile or ""


@dataclass(frozen=True)
class StackInputs:
    """Values extracted from the parameters/tags JSON file."""
    parameter_overrides: Tuple[Tuple[str, str], ...] = ()
    tag_overrides: Tuple[Tuple[str, str], ...] = ()
    pipeline_name: str = ""
    artifact_bucket: str = ""
    connection_arn: str = ""

    @property
    def parameter_strings(self) -> List[str]:
        """Parameter overrides in KEY=VALUE form."""
        return [f"{key}={value}" for key, value in self.parameter_overrides]

    @property
    def tag_strings(self) -> List[str]:
        """Tag overrides in Key=KEY,Value=VALUE form."""
        return [f"Key={key},Value={value}" for key, value in self.tag_overrides]

    def cfn_parameters(self) -> List[Dict[str, str]]:
        """Parameter overrides shaped for the CloudFormation API."""
        return [
            {'ParameterKey': key, 'ParameterValue': value}
            for key, value in self.parameter_overrides
        ]

    def cfn_tags(self) -> List[Dict[str, str]]:
        """Tag overrides shaped for the CloudFormation API."""
        return [{'Key': key, 'Value': value} for key, value in self.tag_overrides]


class StepStatus(Enum):
    """Outcome of a single deployment step."""
    SUCCESS = "success"
    NO_OP = "no_op"
    SKIPPED = "skipped"
    WARNING = "warning"
    FAILED = "failed"

    @property
    def icon(self) -> str:
        return {
            StepStatus.SUCCESS: "✓",
            StepStatus.NO_OP: "✓",
            StepStatus.SKIPPED: "-",
            StepStatus.WARNING: "!",
            StepStatus.FAILED: "✗",
        }[self]


@dataclass
class StepResult:
    """Result of one step of the deployment pipeline."""
    name: str
    status: StepStatus
    message: str = ""
    details: Dict[str, Any] = None

    def __post_init__(self):
        """Ensure details are initialized."""
        if self.details is None:
            self.details = {}

    @property
    def ok(self) -> bool:
        return self.status in (StepStatus.SUCCESS, StepStatus.NO_OP, StepStatus.SKIPPED)


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error_type: str
    error_code: Optional[str]
    message: str
    details: Optional[str] = None

    def __str__(self) -> str:
        """String representation of error."""
        parts = [f"{self.error_type}: {self.message}"]
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        if self.details:
            parts.append(f"Details: {self.details}")
        return " | ".join(parts)


@dataclass
class DeploymentReport:
    """Aggregated outcome of a deployment run."""
    config: RunConfig
    steps: List[StepResult] = field(default_factory=list)
    outputs: Dict[str, str] = field(default_factory=dict)
    stack_status: Optional[str] = None
    pipeline_execution_id: Optional[str] = None
    exit_code: int = 0

    def add(self, result: StepResult) -> StepResult:
        """Record a step result and return it."""
        self.steps.append(result)
        return result

    def step(self, name: str) -> Optional[StepResult]:
        """Return the most recent result recorded for a step name."""
        for result in reversed(self.steps):
            if result.name == name:
                return result
        return None

    @property
    def warnings(self) -> List[StepResult]:
        return [result for result in self.steps if not result.ok]

    @property
    def fully_successful(self) -> bool:
        return self.exit_code == 0 and not self.warnings

    def summary(self) -> str:
        """Generate a human-readable summary of the run."""
        lines = []
        lines.append("=" * 60)
        lines.append("PIPELINE STACK DEPLOYMENT SUMMARY")
        lines.append("=" * 60)

        if self.exit_code != 0:
            overall = "FAILED"
        elif self.warnings:
            overall = "COMPLETED WITH WARNINGS"
        else:
            overall = "SUCCESS"
        lines.append(f"Overall Status: {overall}")
        lines.append(f"Stack: {self.config.stack_name} ({self.config.region})")
        if self.stack_status:
            lines.append(f"Stack Status: {self.stack_status}")
        if self.pipeline_execution_id:
            lines.append(f"Pipeline Execution: {self.pipeline_execution_id}")
        lines.append("")

        lines.append("Steps:")
        for result in self.steps:
            line = f"  {result.status.icon} {result.name}: {result.status.value}"
            if result.message:
                line += f" - {result.message}"
            lines.append(line)

        lines.append("=" * 60)
        return "\n".join(lines)
