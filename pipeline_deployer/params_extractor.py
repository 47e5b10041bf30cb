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
Parameter and tag extraction from the deployment params JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

from .config import CONFIG
from .data_models import StackInputs
from .error_handling import ErrorHandler, ParamsFileException

logger = logging.getLogger(__name__)


def stringify_value(value: Any) -> str:
    """Render a JSON value the way ``jq tostring`` does.

    Strings are returned verbatim; everything else is serialized as compact JSON.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def _pairs(mapping: Any, section: str) -> Tuple[Tuple[str, str], ...]:
    if mapping is None:
        return ()
    if not isinstance(mapping, dict):
        raise ParamsFileException(f"'{section}' must be a JSON object, got {type(mapping).__name__}")
    return tuple((str(key), stringify_value(value)) for key, value in mapping.items())


def _lookup(parameters: Any, key: str) -> str:
    # jq's `// empty` drops null and false
    if not isinstance(parameters, dict):
        return ""
    value = parameters.get(key)
    if value is None or value is False:
        return ""
    return stringify_value(value)


class ParameterExtractor:
    """Reads a params file and derives override lists and convenience values."""

    def __init__(self, params_path: str):
        """Initialize the extractor.

        Args:
            params_path: Path to the JSON file with ``Parameters`` and ``Tags``.
        """
        self.params_path = Path(params_path)

    def load(self) -> Dict[str, Any]:
        """Load the raw params document.

        Raises:
            ParamsFileException: If the file cannot be read or is not valid JSON.
        """
        try:
            with open(self.params_path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            error = ErrorHandler.handle_file_error(e, str(self.params_path), "read")
            raise ParamsFileException(str(error), params_path=str(self.params_path), details=str(e)) from e

        if not isinstance(document, dict):
            raise ParamsFileException(
                f"Params file must contain a JSON object: {self.params_path}",
                params_path=str(self.params_path)
            )
        return document

    def extract(self) -> StackInputs:
        """Derive parameter overrides, tag overrides and convenience values."""
        document = self.load()
        parameters = document.get('Parameters')
        tags = document.get('Tags')
        if tags is not None and not isinstance(tags, dict):
            logger.warning(f"Ignoring Tags in {self.params_path}: expected a JSON object, "
                           f"got {type(tags).__name__}")
            tags = None

        inputs = StackInputs(
            parameter_overrides=_pairs(parameters, 'Parameters'),
            tag_overrides=_pairs(tags, 'Tags'),
            pipeline_name=_lookup(parameters, CONFIG['pipeline_name_key']),
            artifact_bucket=_lookup(parameters, CONFIG['artifact_bucket_key']),
            connection_arn=_lookup(parameters, CONFIG['connection_arn_key']),
        )

        logger.info(f"Extracted {len(inputs.parameter_overrides)} parameters and "
                    f"{len(inputs.tag_overrides)} tags from {self.params_path}")
        logger.debug(f"Parameter overrides: {inputs.parameter_strings}")
        logger.debug(f"Tag overrides: {inputs.tag_strings}")
        return inputs
