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
Stack output reporting.
"""

import logging
from typing import Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .data_models import StepResult, StepStatus
from .error_handling import ErrorHandler

logger = logging.getLogger(__name__)

OUTPUTS_STEP = "Stack outputs"


def format_outputs_table(outputs: Dict[str, str], title: str = "Stack Outputs") -> str:
    """Render output key/value pairs as a bordered table."""
    key_header, value_header = "Key", "Value"
    key_width = max([len(key_header)] + [len(k) for k in outputs])
    value_width = max([len(value_header)] + [len(str(v)) for v in outputs.values()])
    inner_width = key_width + value_width + 5

    title_width = max(inner_width, len(title) + 2)
    if title_width > inner_width:
        value_width += title_width - inner_width
        inner_width = title_width

    separator = f"+-{'-' * key_width}-+-{'-' * value_width}-+"
    lines = [
        "-" * (inner_width + 2),
        f"|{title.center(inner_width)}|",
        separator,
        f"| {key_header.center(key_width)} | {value_header.center(value_width)} |",
        separator,
    ]
    for key, value in outputs.items():
        lines.append(f"| {key.ljust(key_width)} | {str(value).ljust(value_width)} |")
    lines.append(separator)
    return "\n".join(lines)


class StackReporter:
    """Reads final stack status and outputs."""

    def __init__(self, cf_client, stack_name: str):
        self.cf_client = cf_client
        self.stack_name = stack_name

    def fetch_outputs(self) -> Tuple[Optional[str], Dict[str, str]]:
        """Return (stack status, outputs) for the stack.

        Raises:
            ClientError: If the stack cannot be described.
        """
        response = self.cf_client.describe_stacks(StackName=self.stack_name)
        stack = response['Stacks'][0]

        outputs = {}
        for output in stack.get('Outputs', []):
            outputs[output['OutputKey']] = output.get('OutputValue', '')
        return stack.get('StackStatus'), outputs

    def report(self) -> Tuple[StepResult, Dict[str, str]]:
        """Fetch outputs, treating any failure as 'no outputs to show'."""
        try:
            status, outputs = self.fetch_outputs()
        except (ClientError, BotoCoreError, KeyError, IndexError) as e:
            message = ErrorHandler.error_message(e)
            logger.warning(f"Could not read stack outputs: {message}")
            return StepResult(OUTPUTS_STEP, StepStatus.WARNING, "No outputs to show"), {}

        details = {'stack_status': status, 'output_count': len(outputs)}
        if not outputs:
            return StepResult(OUTPUTS_STEP, StepStatus.SUCCESS, "Stack has no outputs", details=details), {}
        return StepResult(OUTPUTS_STEP, StepStatus.SUCCESS, f"{len(outputs)} outputs",
                          details=details), outputs

    def render(self, outputs: Dict[str, str]) -> List[str]:
        """Lines to print for the outputs section."""
        if not outputs:
            return ["(no outputs)"]
        return format_outputs_table(outputs, title=self.stack_name).splitlines()
