"""Workflow Mapping - The persisted directory-name to label lookup table."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from pdcommit import SCHEMA_VERSION


class MappingError(Exception):
    """Raised when the mapping file cannot be read or written."""
    pass


@dataclass
class WorkflowMapping:
    """Workflow and step labels keyed by directory name.

    Step keys are composite ``workflow/step`` strings.
    """
    schema: str = SCHEMA_VERSION
    workflows: dict[str, str] = field(default_factory=dict)
    steps: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.workflows and not self.steps

    def to_dict(self) -> dict:
        return {
            'schema': self.schema,
            'workflows': dict(self.workflows),
            'steps': dict(self.steps),
        }

    def validate(self) -> list[str]:
        """Return warnings for this mapping. Never fatal."""
        warnings = []
        if self.schema != SCHEMA_VERSION:
            warnings.append(f"This project is using an unsupported schema version: {self.schema}")
        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'WorkflowMapping':
        return cls(
            schema=str(data.get('schema') or ''),
            workflows=_string_map(data.get('workflows'), 'workflows'),
            steps=_string_map(data.get('steps'), 'steps'),
        )


def _string_map(value, section: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MappingError(f"'{section}' must be a mapping of directory names to labels")
    # A blank label (`auth:`) loads as None and means an empty label
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


class MappingStore:
    """Loads and saves the mapping file at a fixed path."""

    DEFAULT_FILENAME = "pipedream-config.yaml"

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else Path.cwd() / self.DEFAULT_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> WorkflowMapping:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise MappingError(f"Could not read {self.path}: {e}")
        except UnicodeDecodeError as e:
            raise MappingError(f"{self.path} is not valid UTF-8: {e}")
        except yaml.YAMLError as e:
            raise MappingError(f"Invalid YAML in {self.path}: {e}")

        if not isinstance(data, dict):
            raise MappingError(f"{self.path} does not contain a mapping")
        return WorkflowMapping.from_dict(data)

    def save(self, mapping: WorkflowMapping) -> Path:
        """Write the mapping atomically. The previous file survives any failure."""
        tmp = self.path.with_name(f".{self.path.name}.tmp.{os.getpid()}")
        try:
            text = yaml.safe_dump(mapping.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)
            tmp.write_text(text, encoding='utf-8')
            os.replace(tmp, self.path)
        except (OSError, yaml.YAMLError) as e:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise MappingError(f"Could not write {self.path}: {e}")
        return self.path
