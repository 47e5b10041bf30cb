"""
Pytest configuration and shared fixtures for pipeline deployer tests.
"""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from ..data_models import RunConfig

SAMPLE_TEMPLATE = """AWSTemplateFormatVersion: '2010-09-09'
Description: Test deploy pipeline
Parameters:
  PipelineName:
    Type: String
  ArtifactBucketName:
    Type: String
  ConnectionArn:
    Type: String
  Environment:
    Type: String
    Default: dev
Resources:
  Pipeline:
    Type: AWS::CodePipeline::Pipeline
    Properties:
      Name: !Ref PipelineName
      RoleArn: !GetAtt PipelineRole.Arn
      ArtifactStore:
        Type: S3
        Location: !Sub '${ArtifactBucketName}'
Outputs:
  PipelineUrl:
    Value: !Sub 'https://console.aws.amazon.com/codesuite/codepipeline/pipelines/${PipelineName}/view'
"""

SAMPLE_PARAMS = {
    "Parameters": {
        "PipelineName": "trd-deploy-pipeline",
        "ArtifactBucketName": "trd-artifacts",
        "ConnectionArn": "arn:aws:codestar-connections:us-east-1:123456789012:connection/abc",
    },
    "Tags": {
        "Project": "trd",
        "Owner": "platform"
    }
}


def client_error(code: str, message: str, operation: str = 'Operation') -> ClientError:
    """Build a botocore ClientError for tests."""
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


@pytest.fixture
def workspace(tmp_path):
    """Temporary workspace with a template and a params file."""
    template_path = tmp_path / "codepipeline-deploy.yml"
    template_path.write_text(SAMPLE_TEMPLATE)

    params_path = tmp_path / "deploy-params.json"
    params_path.write_text(json.dumps(SAMPLE_PARAMS, indent=2))

    return {
        'root': tmp_path,
        'template': str(template_path),
        'params': str(params_path),
    }


@pytest.fixture
def write_params(tmp_path):
    """Write an arbitrary params document and return its path."""
    def _write(document, name="params.json") -> str:
        path = Path(tmp_path) / name
        if isinstance(document, str):
            path.write_text(document)
        else:
            path.write_text(json.dumps(document))
        return str(path)
    return _write


@pytest.fixture
def run_config(workspace):
    """RunConfig pointing at the temporary workspace."""
    return RunConfig(
        region='us-east-1',
        stack_name='test-pipeline-stack',
        template_path=workspace['template'],
        params_path=workspace['params'],
        profile=None,
        validate=True,
        run_pipeline=False,
    )


@pytest.fixture
def aws_clients():
    """Mock boto3 clients keyed by service name, with happy-path defaults."""
    cloudformation = Mock()
    cloudformation.validate_template.return_value = {
        'Parameters': [
            {'ParameterKey': 'PipelineName'},
            {'ParameterKey': 'ArtifactBucketName'},
            {'ParameterKey': 'ConnectionArn'},
            {'ParameterKey': 'Environment'},
        ]
    }
    cloudformation.describe_stacks.return_value = {
        'Stacks': [{
            'StackName': 'test-pipeline-stack',
            'StackStatus': 'CREATE_COMPLETE',
            'Parameters': [],
            'Outputs': [
                {'OutputKey': 'PipelineUrl', 'OutputValue': 'https://example.com/pipeline'},
            ],
        }]
    }
    cloudformation.update_stack.return_value = {'StackId': 'stack-id'}
    cloudformation.create_stack.return_value = {'StackId': 'stack-id'}

    s3 = Mock()
    s3.head_bucket.return_value = {}

    connections = Mock()
    connections.get_connection.return_value = {'Connection': {'ConnectionStatus': 'AVAILABLE'}}

    codepipeline = Mock()
    codepipeline.start_pipeline_execution.return_value = {'pipelineExecutionId': 'exec-1234'}

    return {
        'cloudformation': cloudformation,
        's3': s3,
        'codestar-connections': connections,
        'codepipeline': codepipeline,
    }


@pytest.fixture
def mock_session(aws_clients):
    """boto3 session mock that hands out the mock clients."""
    session = Mock()
    session.client.side_effect = lambda service, **kwargs: aws_clients[service]
    return session
