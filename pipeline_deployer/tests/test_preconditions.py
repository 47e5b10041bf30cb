"""
Unit tests for precondition checks.
"""

from dataclasses import replace
from unittest.mock import patch

import pytest
from botocore.exceptions import ProfileNotFound

from ..error_handling import PreconditionException
from ..preconditions import check_input_files, check_prerequisites, create_session


class TestPreconditions:

    def test_input_files_present(self, run_config):
        check_input_files(run_config)

    def test_template_checked_before_params(self, run_config, tmp_path):
        config = replace(run_config, template_path=str(tmp_path / 'a.yml'),
                         params_path=str(tmp_path / 'b.json'))

        with pytest.raises(PreconditionException) as exc_info:
            check_input_files(config)

        assert 'Template not found' in str(exc_info.value)
        assert exc_info.value.path.endswith('a.yml')

    def test_directory_is_not_a_template(self, run_config, tmp_path):
        config = replace(run_config, template_path=str(tmp_path))

        with pytest.raises(PreconditionException):
            check_input_files(config)

    @patch('pipeline_deployer.preconditions.boto3.Session')
    def test_session_with_profile(self, mock_session_class, run_config):
        config = replace(run_config, profile='my-profile')

        session = create_session(config)

        mock_session_class.assert_called_once_with(region_name='us-east-1', profile_name='my-profile')
        assert session is mock_session_class.return_value

    @patch('pipeline_deployer.preconditions.boto3.Session')
    def test_no_credentials(self, mock_session_class, run_config):
        mock_session_class.return_value.get_credentials.return_value = None

        with pytest.raises(PreconditionException) as exc_info:
            create_session(run_config)

        assert 'No AWS credentials found' in str(exc_info.value)

    @patch('pipeline_deployer.preconditions.boto3.Session')
    def test_unknown_profile(self, mock_session_class, run_config):
        mock_session_class.side_effect = ProfileNotFound(profile='ghost')

        with pytest.raises(PreconditionException):
            create_session(replace(run_config, profile='ghost'))

    @patch('pipeline_deployer.preconditions.boto3.Session')
    def test_files_checked_before_session(self, mock_session_class, run_config, tmp_path):
        config = replace(run_config, params_path=str(tmp_path / 'missing.json'))

        with pytest.raises(PreconditionException):
            check_prerequisites(config)

        mock_session_class.assert_not_called()
