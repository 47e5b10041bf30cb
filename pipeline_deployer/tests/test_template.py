"""
Unit tests for template loading and server-side validation.
"""

import pytest

from ..error_handling import TemplateValidationException
from ..template_loader import TemplateInspector, load_cloudformation_template
from ..template_validator import TemplateValidator
from .conftest import client_error


class TestTemplateLoader:

    def test_intrinsic_functions(self, workspace):
        template = load_cloudformation_template(workspace['template'])

        properties = template['Resources']['Pipeline']['Properties']
        assert properties['Name'] == {'Ref': 'PipelineName'}
        assert properties['RoleArn'] == {'Fn::GetAtt': ['PipelineRole', 'Arn']}
        assert properties['ArtifactStore']['Location'] == {'Fn::Sub': '${ArtifactBucketName}'}

    def test_sequence_intrinsic(self, tmp_path):
        path = tmp_path / "t.yml"
        path.write_text("Outputs:\n  Joined:\n    Value: !Join ['-', [a, b]]\n")

        template = load_cloudformation_template(str(path))

        assert template['Outputs']['Joined']['Value'] == {'Fn::Join': ['-', ['a', 'b']]}

    def test_json_template(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text('{"Parameters": {"Name": {"Type": "String", "Default": "x"}}, "Resources": {}}')

        inspector = TemplateInspector(str(path))

        assert inspector.parameter_keys() == ['Name']
        assert inspector.required_parameter_keys() == []

    def test_non_mapping_template_rejected(self, tmp_path):
        path = tmp_path / "t.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_cloudformation_template(str(path))

    def test_required_parameters(self, workspace):
        inspector = TemplateInspector(workspace['template'])

        assert inspector.required_parameter_keys() == ['PipelineName', 'ArtifactBucketName', 'ConnectionArn']


class TestTemplateValidator:

    def test_validate_returns_parameter_keys(self, aws_clients, workspace):
        validator = TemplateValidator(aws_clients['cloudformation'])

        keys = validator.validate(workspace['template'])

        assert 'PipelineName' in keys
        body = aws_clients['cloudformation'].validate_template.call_args.kwargs['TemplateBody']
        assert body.startswith("AWSTemplateFormatVersion")

    def test_validation_error_raises(self, aws_clients, workspace):
        aws_clients['cloudformation'].validate_template.side_effect = client_error(
            'ValidationError', 'Template format error: unsupported structure.', 'ValidateTemplate')
        validator = TemplateValidator(aws_clients['cloudformation'])

        with pytest.raises(TemplateValidationException) as exc_info:
            validator.validate(workspace['template'])

        assert exc_info.value.error_code == 'ValidationError'
        assert "Template format error" in str(exc_info.value)
