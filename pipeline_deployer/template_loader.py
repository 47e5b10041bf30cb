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
Local CloudFormation template loading for parameter inspection.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


class CloudFormationLoader(yaml.SafeLoader):
    """SafeLoader that understands CloudFormation short-form intrinsic tags."""


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Dict[str, Any]:
    name = 'Ref' if tag_suffix == 'Ref' else f'Fn::{tag_suffix}'

    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        if tag_suffix == 'GetAtt':
            value = value.split('.', 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)

    return {name: value}


CloudFormationLoader.add_multi_constructor('!', _construct_intrinsic)


def load_cloudformation_template(file_path: str) -> Dict[str, Any]:
    """Load a CloudFormation template written in YAML or JSON.

    JSON templates parse as YAML, so a single loader handles both.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        template = yaml.load(f, Loader=CloudFormationLoader)

    if not isinstance(template, dict):
        raise ValueError(f"Template is not a mapping: {file_path}")
    return template


class TemplateInspector:
    """Read-only view of a template's declared parameters."""

    def __init__(self, template_path: str):
        self.template_path = Path(template_path)
        self._template: Optional[Dict[str, Any]] = None

    @property
    def template(self) -> Dict[str, Any]:
        if self._template is None:
            self._template = load_cloudformation_template(str(self.template_path))
            logger.debug(f"Loaded template {self.template_path} with "
                         f"{len(self._template.get('Resources', {}) or {})} resources")
        return self._template

    def declared_parameters(self) -> Dict[str, Dict[str, Any]]:
        """Parameters section of the template, empty when absent."""
        return self.template.get('Parameters') or {}

    def parameter_keys(self) -> List[str]:
        return list(self.declared_parameters().keys())

    def required_parameter_keys(self) -> List[str]:
        """Declared parameters that have no Default value."""
        return [
            key for key, definition in self.declared_parameters().items()
            if not isinstance(definition, dict) or 'Default' not in definition
        ]
