"""
Scenario Manifest
=================
Reads image scenarios from a YAML file so a suite of images can be
described as data instead of one hand-written test per image.

Format:

    scenarios:
      - name: ruby-22
        builder_image: ruby-22-centos7
        source: https://example/app
        context_dir: ""
        output_image: app-test
        checks:
          - command: ruby --version
            expected_output: ruby 2.2

The first check replaces the default software-collection check; any
further checks run alongside it as extra checks.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from imagetest.checks.output_checks import ImageCheck, command_check
from imagetest.core.config import CONTAINER_RUNTIME
from imagetest.core.errors import ImageTestError
from imagetest.models.command_spec import CommandSpec

logger = logging.getLogger(__name__)


class ManifestError(ImageTestError):
    """The manifest could not be read or does not match the schema."""


class ScenarioSpec(BaseModel):
    name: str = ""
    builder_image: str
    source: str
    context_dir: str = ""
    output_image: str
    checks: list[CommandSpec] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.output_image

    def output_check(self, runtime: str = CONTAINER_RUNTIME) -> Optional[ImageCheck]:
        """Check replacing the default one, or None to keep the default."""
        if not self.checks:
            return None
        first = self.checks[0]
        return command_check(first.command, first.expected_output, runtime=runtime)

    def extra_checks(self, runtime: str = CONTAINER_RUNTIME) -> list[ImageCheck]:
        return [
            command_check(spec.command, spec.expected_output, runtime=runtime)
            for spec in self.checks[1:]
        ]


class ScenarioManifest(BaseModel):
    scenarios: list[ScenarioSpec] = Field(default_factory=list)


def parse_manifest(text: str) -> ScenarioManifest:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid YAML: {e}") from e

    if data is None:
        return ScenarioManifest()
    if not isinstance(data, dict):
        raise ManifestError("manifest must be a mapping with a 'scenarios' list")

    try:
        return ScenarioManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"invalid manifest: {e}") from e


def load_manifest(path: Union[str, Path]) -> ScenarioManifest:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"cannot read manifest {path}: {e}") from e

    manifest = parse_manifest(text)
    logger.info("Loaded %d scenario(s) from %s", len(manifest.scenarios), path)
    return manifest
