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
Configuration constants for the pipeline stack deployer.
"""

import os

CONFIG = {
    # Stack defaults (override via flags)
    'aws_region': os.getenv('AWS_REGION', 'us-east-1'),
    'stack_name': 'trd-codepipeline-deploy',
    'template_file': 'cloudformation/pipelines/codepipeline-deploy.yml',
    'params_file': 'cloudformation/envs/dev/pipelines/deploy-params.json',

    # CloudFormation configuration
    'capabilities': ['CAPABILITY_NAMED_IAM'],
    'no_updates_message': 'No updates are to be performed',
    'missing_stack_message': 'does not exist',
    'review_in_progress_status': 'REVIEW_IN_PROGRESS',  # change set shell, no resources
    'waiter_delay': 30,          # seconds between status polls
    'waiter_max_attempts': 120,  # 60 minutes max

    # Params file keys read as convenience values
    'pipeline_name_key': 'PipelineName',
    'artifact_bucket_key': 'ArtifactBucketName',
    'connection_arn_key': 'ConnectionArn',

    # CodeStar Connections
    'connection_available_status': 'AVAILABLE',
    'connection_unknown_status': 'UNKNOWN',

    # Logging configuration
    'log_level': os.getenv('LOG_LEVEL', 'INFO'),
}

