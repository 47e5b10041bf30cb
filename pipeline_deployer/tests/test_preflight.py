"""
Unit tests for PreflightAuditor.
"""

import pytest

from ..data_models import StackInputs, StepStatus
from ..preflight import PreflightAuditor
from .conftest import client_error


@pytest.fixture
def auditor(aws_clients):
    return PreflightAuditor(aws_clients['s3'], aws_clients['codestar-connections'])


class TestArtifactBucket:

    def test_reachable_bucket(self, auditor, aws_clients):
        result = auditor.check_artifact_bucket("trd-artifacts")

        assert result.status == StepStatus.SUCCESS
        aws_clients['s3'].head_bucket.assert_called_once_with(Bucket="trd-artifacts")

    def test_missing_bucket_is_warning(self, auditor, aws_clients):
        aws_clients['s3'].head_bucket.side_effect = client_error('404', 'Not Found', 'HeadBucket')

        result = auditor.check_artifact_bucket("trd-artifacts")

        assert result.status == StepStatus.WARNING
        assert "trd-artifacts" in result.message
        assert result.details['error_code'] == '404'

    def test_no_bucket_name_skips(self, auditor, aws_clients):
        result = auditor.check_artifact_bucket("")

        assert result.status == StepStatus.SKIPPED
        aws_clients['s3'].head_bucket.assert_not_called()


class TestConnection:

    def test_available_connection(self, auditor):
        result = auditor.check_connection("arn:conn")

        assert result.status == StepStatus.SUCCESS
        assert result.details['connection_status'] == 'AVAILABLE'

    def test_pending_connection_warns(self, auditor, aws_clients):
        aws_clients['codestar-connections'].get_connection.return_value = {
            'Connection': {'ConnectionStatus': 'PENDING'}
        }

        result = auditor.check_connection("arn:conn")

        assert result.status == StepStatus.WARNING
        assert "PENDING" in result.message
        assert "Authorize" in result.message

    def test_lookup_failure_reports_unknown(self, auditor, aws_clients):
        aws_clients['codestar-connections'].get_connection.side_effect = client_error(
            'ResourceNotFoundException', 'Connection not found', 'GetConnection')

        result = auditor.check_connection("arn:conn")

        assert result.status == StepStatus.WARNING
        assert result.details['connection_status'] == 'UNKNOWN'

    def test_no_connection_skips(self, auditor, aws_clients):
        assert auditor.check_connection("").status == StepStatus.SKIPPED
        aws_clients['codestar-connections'].get_connection.assert_not_called()


class TestTemplateParameterAudit:

    def test_matching_parameters(self, auditor, workspace):
        inputs = StackInputs(parameter_overrides=(
            ("PipelineName", "p"), ("ArtifactBucketName", "b"), ("ConnectionArn", "c")))

        result = auditor.audit_template_parameters(workspace['template'], inputs)

        assert result.status == StepStatus.SUCCESS

    def test_undeclared_and_missing_parameters(self, auditor, workspace):
        inputs = StackInputs(parameter_overrides=(("PipelineName", "p"), ("Bogus", "x")))

        result = auditor.audit_template_parameters(workspace['template'], inputs)

        assert result.status == StepStatus.WARNING
        assert result.details['undeclared'] == ['Bogus']
        assert result.details['missing'] == ['ArtifactBucketName', 'ConnectionArn']

    def test_unparseable_template_is_warning(self, auditor, tmp_path):
        template = tmp_path / "bad.yml"
        template.write_text("Resources: [unclosed\n")

        result = auditor.audit_template_parameters(str(template), StackInputs())

        assert result.status == StepStatus.WARNING
