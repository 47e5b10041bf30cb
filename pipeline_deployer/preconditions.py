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
Precondition checks run before any AWS call is made.
"""

import logging
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError

from .data_models import RunConfig
from .error_handling import PreconditionException

logger = logging.getLogger(__name__)


def check_input_files(config: RunConfig) -> None:
    """Verify the template and params files exist.

    Raises:
        PreconditionException: On the first missing file.
    """
    if not Path(config.template_path).is_file():
        raise PreconditionException(f"Template not found: {config.template_path}",
                                    path=config.template_path)
    if not Path(config.params_path).is_file():
        raise PreconditionException(f"Params JSON not found: {config.params_path}",
                                    path=config.params_path)


def create_session(config: RunConfig) -> boto3.Session:
    """Create a boto3 session for the configured profile and region.

    Raises:
        PreconditionException: If the profile is unknown or no credentials resolve.
    """
    session_kwargs = {'region_name': config.region}
    if config.profile:
        session_kwargs['profile_name'] = config.profile

    try:
        session = boto3.Session(**session_kwargs)
        credentials = session.get_credentials()
    except BotoCoreError as e:
        raise PreconditionException(f"AWS session could not be created: {e}") from e

    if not credentials:
        raise PreconditionException("No AWS credentials found")

    if config.profile:
        logger.info(f"Using AWS profile: {config.profile}")
    else:
        logger.info("Using default AWS credentials")
    return session


def check_prerequisites(config: RunConfig) -> boto3.Session:
    """Run all precondition checks in order and return a ready session.

    Input files are checked first so a bad path never reaches AWS.
    """
    check_input_files(config)
    return create_session(config)
