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
Command-line interface for deploying the pipeline stack.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import CONFIG
from .data_models import RunConfig
from .error_handling import PreconditionException
from .orchestrator import PipelineStackDeployer
from .preconditions import check_prerequisites


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Set up logging configuration.

    Args:
        verbose: Enable verbose logging.
        log_file: Optional log file path.
    """
    log_level = logging.DEBUG if verbose else getattr(logging, CONFIG['log_level'].upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)

    # Reduce noise from boto3/botocore
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog='deploy-pipeline-stack',
        allow_abbrev=False,
        description='Deploy the CodePipeline stack with CloudFormation, '
                    'reading parameters and tags from a JSON file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deploy with defaults
  deploy-pipeline-stack

  # Deploy a different stack with a named profile
  deploy-pipeline-stack --stack-name my-pipeline --profile my-aws-profile

  # Skip server-side validation and start the pipeline afterwards
  deploy-pipeline-stack --no-validate --run-pipeline

  # Custom template and params
  deploy-pipeline-stack \\
    --template-file cloudformation/pipelines/codepipeline-deploy.yml \\
    --params-file cloudformation/envs/prod/pipelines/deploy-params.json

Params file format:
  {"Parameters": {"PipelineName": "...", ...}, "Tags": {"Owner": "...", ...}}
        """
    )

    aws_group = parser.add_argument_group('AWS Configuration')
    aws_group.add_argument(
        '--region',
        default=CONFIG['aws_region'],
        help=f'AWS region (default: $AWS_REGION or {CONFIG["aws_region"]})'
    )
    aws_group.add_argument(
        '--profile',
        help='AWS profile to use for authentication (default: use default credentials)'
    )

    stack_group = parser.add_argument_group('Stack')
    stack_group.add_argument(
        '--stack-name',
        default=CONFIG['stack_name'],
        help=f'CloudFormation stack name (default: {CONFIG["stack_name"]})'
    )
    stack_group.add_argument(
        '--template-file',
        default=CONFIG['template_file'],
        help=f'Path to CloudFormation template (default: {CONFIG["template_file"]})'
    )
    stack_group.add_argument(
        '--params-file',
        default=CONFIG['params_file'],
        help=f'Path to parameters/tags JSON file (default: {CONFIG["params_file"]})'
    )

    execution_group = parser.add_argument_group('Execution Options')
    execution_group.add_argument(
        '--no-validate',
        dest='validate',
        action='store_false',
        help='Skip server-side template validation'
    )
    execution_group.add_argument(
        '--run-pipeline',
        action='store_true',
        help='Start a pipeline execution after a successful deploy'
    )

    logging_group = parser.add_argument_group('Logging Options')
    logging_group.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    logging_group.add_argument(
        '--log-file',
        help='Write logs to specified file'
    )

    return parser


def build_run_config(args: argparse.Namespace) -> RunConfig:
    """Freeze parsed arguments into a RunConfig."""
    return RunConfig(
        region=args.region,
        stack_name=args.stack_name,
        template_path=args.template_file,
        params_path=args.params_file,
        profile=args.profile or None,
        validate=args.validate,
        run_pipeline=args.run_pipeline,
    )


def run_deployment(config: RunConfig) -> int:
    """Run precondition checks and the deployment.

    Returns:
        Exit code (0 for success or best-effort completion, 1 for failure).
    """
    try:
        session = check_prerequisites(config)
    except PreconditionException as e:
        print(str(e), file=sys.stderr)
        return 1

    deployer = PipelineStackDeployer(config, session)
    report = deployer.run()

    print(report.summary())
    if report.exit_code == 0:
        print("Done.")
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code. Unrecognized arguments exit with 2 from argparse.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    config = build_run_config(args)

    try:
        return run_deployment(config)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        print(f"Unexpected error: {str(e)}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
