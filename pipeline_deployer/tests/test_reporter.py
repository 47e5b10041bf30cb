"""
Unit tests for output reporting and the pipeline trigger.
"""

from ..data_models import StepStatus
from ..pipeline_trigger import PipelineTrigger
from ..reporter import StackReporter, format_outputs_table
from .conftest import client_error


class TestFormatOutputsTable:

    def test_table_contains_rows(self):
        table = format_outputs_table({'PipelineUrl': 'https://x', 'Arn': 'arn:aws:1'}, title='my-stack')
        lines = table.splitlines()

        assert 'my-stack' in lines[1]
        assert any('PipelineUrl' in line and 'https://x' in line for line in lines)
        assert any('Arn' in line and 'arn:aws:1' in line for line in lines)

    def test_rows_have_equal_width(self):
        table = format_outputs_table({'A': 'short', 'LongerKeyName': 'a much longer value'}, title='t')

        widths = {len(line) for line in table.splitlines()}
        assert len(widths) == 1

    def test_long_title_widens_table(self):
        table = format_outputs_table({'A': 'b'}, title='a-very-long-stack-name-for-testing')

        widths = {len(line) for line in table.splitlines()}
        assert len(widths) == 1


class TestStackReporter:

    def test_report_outputs(self, aws_clients):
        reporter = StackReporter(aws_clients['cloudformation'], 'test-pipeline-stack')

        result, outputs = reporter.report()

        assert result.status == StepStatus.SUCCESS
        assert outputs == {'PipelineUrl': 'https://example.com/pipeline'}
        assert result.details['stack_status'] == 'CREATE_COMPLETE'

    def test_query_failure_means_no_outputs(self, aws_clients):
        aws_clients['cloudformation'].describe_stacks.side_effect = client_error(
            'ValidationError', 'Stack with id test-pipeline-stack does not exist', 'DescribeStacks')
        reporter = StackReporter(aws_clients['cloudformation'], 'test-pipeline-stack')

        result, outputs = reporter.report()

        assert outputs == {}
        assert result.status == StepStatus.WARNING
        assert reporter.render(outputs) == ["(no outputs)"]

    def test_stack_without_outputs(self, aws_clients):
        aws_clients['cloudformation'].describe_stacks.return_value = {
            'Stacks': [{'StackStatus': 'UPDATE_COMPLETE'}]
        }
        reporter = StackReporter(aws_clients['cloudformation'], 'test-pipeline-stack')

        result, outputs = reporter.report()

        assert outputs == {}
        assert result.status == StepStatus.SUCCESS


class TestPipelineTrigger:

    def test_start_execution(self, aws_clients):
        trigger = PipelineTrigger(aws_clients['codepipeline'])

        result = trigger.start('trd-deploy-pipeline')

        assert result.status == StepStatus.SUCCESS
        assert result.details['execution_id'] == 'exec-1234'
        aws_clients['codepipeline'].start_pipeline_execution.assert_called_once_with(name='trd-deploy-pipeline')

    def test_skip_without_name(self, aws_clients):
        trigger = PipelineTrigger(aws_clients['codepipeline'])

        for name in ("", "null"):
            assert trigger.start(name).status == StepStatus.SKIPPED
        aws_clients['codepipeline'].start_pipeline_execution.assert_not_called()

    def test_start_failure_is_swallowed(self, aws_clients):
        aws_clients['codepipeline'].start_pipeline_execution.side_effect = client_error(
            'PipelineNotFoundException', 'not found', 'StartPipelineExecution')
        trigger = PipelineTrigger(aws_clients['codepipeline'])

        result = trigger.start('missing')

        assert result.status == StepStatus.FAILED
        assert 'PipelineNotFoundException' in result.message
