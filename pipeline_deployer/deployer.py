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
CloudFormation create-or-update, tag reapplication and completion waits.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from .config import CONFIG
from .data_models import RunConfig, StackInputs, StepResult, StepStatus
from .error_handling import ErrorHandler
from .template_validator import read_template_body

logger = logging.getLogger(__name__)

DEPLOY_STEP = "Deploy stack"
TAGS_STEP = "Apply stack tags"
WAIT_STEP = "Wait for stack"


class StackDeployer:
    """Deploys one CloudFormation stack with best-effort error handling.

    Every public method returns a StepResult instead of raising, so a failed
    or no-op deploy never stops the rest of the run.
    """

    def __init__(self, cf_client, config: RunConfig):
        """Initialize the deployer.

        Args:
            cf_client: boto3 CloudFormation client.
            config: Resolved run configuration.
        """
        self.cf_client = cf_client
        self.config = config
        self.stack_name = config.stack_name
        self.capabilities = list(CONFIG['capabilities'])
        self.waiter_config = {
            'Delay': CONFIG['waiter_delay'],
            'MaxAttempts': CONFIG['waiter_max_attempts'],
        }

    def describe_stack(self) -> Optional[Dict[str, Any]]:
        """Return the stack description, or None if the stack does not exist."""
        try:
            response = self.cf_client.describe_stacks(StackName=self.stack_name)
        except ClientError as e:
            if ErrorHandler.is_missing_stack_error(e):
                return None
            raise

        stacks = response.get('Stacks', [])
        return stacks[0] if stacks else None

    def filter_overrides(self, inputs: StackInputs,
                         accepted_keys: Optional[Sequence[str]]) -> List[Dict[str, Any]]:
        """Parameter overrides limited to the keys the target accepts.

        Overrides the template does not declare are dropped with a warning,
        matching ``aws cloudformation deploy --parameter-overrides``. When the
        accepted keys are unknown every override is passed through.
        """
        parameters = inputs.cfn_parameters()
        if accepted_keys is None:
            return parameters

        ignored = [p['ParameterKey'] for p in parameters if p['ParameterKey'] not in accepted_keys]
        if ignored:
            logger.warning(f"Ignoring parameters not declared by the template: {', '.join(ignored)}")
        return [p for p in parameters if p['ParameterKey'] in accepted_keys]

    def build_update_parameters(self, inputs: StackInputs, stack: Dict[str, Any],
                                template_parameter_keys: Optional[Sequence[str]] = None
                                ) -> List[Dict[str, Any]]:
        """Parameter list for an UpdateStack call.

        Stack parameters that are not overridden keep their previous value,
        limited to those the target template still declares when known.
        """
        parameters = self.filter_overrides(inputs, template_parameter_keys)
        overridden = {p['ParameterKey'] for p in parameters}

        for existing in stack.get('Parameters', []):
            key = existing['ParameterKey']
            if key in overridden:
                continue
            if template_parameter_keys is not None and key not in template_parameter_keys:
                continue
            parameters.append({'ParameterKey': key, 'UsePreviousValue': True})

        return parameters

    def _remove_review_stack(self) -> None:
        # A stack left in REVIEW_IN_PROGRESS by an unexecuted change set has
        # no resources and accepts neither CreateStack nor UpdateStack.
        logger.warning(f"Stack {self.stack_name} is in REVIEW_IN_PROGRESS, deleting before creating...")
        self.cf_client.delete_stack(StackName=self.stack_name)
        self.cf_client.get_waiter('stack_delete_complete').wait(
            StackName=self.stack_name,
            WaiterConfig=self.waiter_config
        )

    def deploy(self, inputs: StackInputs,
               template_parameter_keys: Optional[Sequence[str]] = None) -> StepResult:
        """Create the stack, or update it if it already exists, then wait."""
        logger.info(f"Deploying stack {self.stack_name} from {self.config.template_path}")

        try:
            template_body = read_template_body(self.config.template_path)
            stack = self.describe_stack()
            status = stack.get('StackStatus') if stack else None

            if stack is None or status == CONFIG['review_in_progress_status']:
                if stack is not None:
                    self._remove_review_stack()
                logger.info(f"Stack {self.stack_name} does not exist, creating...")
                response = self.cf_client.create_stack(
                    StackName=self.stack_name,
                    TemplateBody=template_body,
                    Parameters=self.filter_overrides(inputs, template_parameter_keys),
                    Capabilities=self.capabilities,
                )
                operation = "CREATE"
            else:
                logger.info(f"Stack {self.stack_name} exists ({status}), updating...")
                response = self.cf_client.update_stack(
                    StackName=self.stack_name,
                    TemplateBody=template_body,
                    Parameters=self.build_update_parameters(inputs, stack, template_parameter_keys),
                    Capabilities=self.capabilities,
                )
                operation = "UPDATE"

            stack_id = response.get('StackId')
            logger.info(f"Stack {operation} initiated: {stack_id}")

            waiter_name = 'stack_create_complete' if operation == "CREATE" else 'stack_update_complete'
            self.cf_client.get_waiter(waiter_name).wait(
                StackName=self.stack_name,
                WaiterConfig=self.waiter_config
            )

        except (ClientError, BotoCoreError, WaiterError, OSError) as e:
            if ErrorHandler.is_no_update_error(e):
                logger.info("No updates needed for the stack")
                return StepResult(DEPLOY_STEP, StepStatus.NO_OP, "No changes to deploy")

            message = ErrorHandler.error_message(e)
            logger.warning(f"Stack deployment failed: {message}")
            return StepResult(DEPLOY_STEP, StepStatus.FAILED, message)

        logger.info(f"Stack {operation.lower()} completed successfully")
        return StepResult(DEPLOY_STEP, StepStatus.SUCCESS, f"{operation} complete",
                          details={'operation': operation, 'stack_id': stack_id})

    def apply_tags(self, inputs: StackInputs) -> StepResult:
        """Reapply stack tags with a second update on the previous template.

        UpdateStack needs the full parameter list even when only tags change,
        so every parameter is resubmitted alongside the tags.
        """
        if not inputs.tag_overrides:
            return StepResult(TAGS_STEP, StepStatus.SKIPPED, "No Tags in params file")

        logger.info(f"Applying {len(inputs.tag_overrides)} stack tags")

        try:
            stack = self.describe_stack() or {}
            stack_parameter_keys = [p['ParameterKey'] for p in stack.get('Parameters', [])]
            self.cf_client.update_stack(
                StackName=self.stack_name,
                UsePreviousTemplate=True,
                Parameters=self.build_update_parameters(inputs, stack, stack_parameter_keys),
                Capabilities=self.capabilities,
                Tags=inputs.cfn_tags(),
            )
        except (ClientError, BotoCoreError) as e:
            if ErrorHandler.is_no_update_error(e):
                logger.info("Stack tags already applied")
                return StepResult(TAGS_STEP, StepStatus.NO_OP, "Tags already applied")

            message = ErrorHandler.error_message(e)
            logger.warning(f"Applying stack tags failed: {message}")
            return StepResult(TAGS_STEP, StepStatus.FAILED, message)

        return StepResult(TAGS_STEP, StepStatus.SUCCESS, f"{len(inputs.tag_overrides)} tags submitted",
                          details={'tags': inputs.tag_strings})

    def _wait(self, waiter_name: str) -> bool:
        try:
            self.cf_client.get_waiter(waiter_name).wait(
                StackName=self.stack_name,
                WaiterConfig=self.waiter_config
            )
            return True
        except (WaiterError, ClientError, BotoCoreError) as e:
            logger.debug(f"Waiter {waiter_name} did not succeed: {e}")
            return False

    def _current_status(self) -> Optional[str]:
        try:
            stack = self.describe_stack()
        except (ClientError, BotoCoreError) as e:
            logger.debug(f"Could not read stack status: {e}")
            return None
        return stack.get('StackStatus') if stack else None

    def wait_for_completion(self) -> StepResult:
        """Block until the stack reaches a terminal create, or else update, state.

        A stack already in an UPDATE_* state can never reach a create terminal
        state, so the create wait is skipped for it.
        """
        logger.info("Waiting for stack to complete...")
        status = self._current_status()

        if not (status or "").startswith("UPDATE") and self._wait('stack_create_complete'):
            return StepResult(WAIT_STEP, StepStatus.SUCCESS, "Stack create complete")

        if self._wait('stack_update_complete'):
            return StepResult(WAIT_STEP, StepStatus.SUCCESS, "Stack update complete")

        final_status = self._current_status()
        logger.warning(f"Stack {self.stack_name} did not reach a complete state (status: {final_status})")
        return StepResult(WAIT_STEP, StepStatus.FAILED,
                          f"Stack did not reach a complete state (status: {final_status or 'UNKNOWN'})",
                          details={'stack_status': final_status})
