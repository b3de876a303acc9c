"""Configuration for ripple.

Settings live in the [tool.ripple] table of the root pyproject.toml, or
at the top level of a ripple.toml for workspaces without a pyproject.toml
(Cargo, npm). Every setting is optional:

    [tool.ripple]
    ecosystem = "cargo"     # uv | cargo | npm, detected when omitted
    tag_prefix = "v"        # version tags look like v1.2.3

    [tool.ripple.commit_policy]
    forbid_trailing_period = true
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .changes import CommitPolicy
from .errors import ConfigError
from .toml import get_tool_table, load_toml

CONFIG_FILE = "ripple.toml"


class RippleConfig(BaseModel):
    """Validated ripple settings."""

    model_config = ConfigDict(extra="forbid")

    ecosystem: Literal["uv", "cargo", "npm"] | None = None
    tag_prefix: str = "v"
    commit_policy: CommitPolicy = Field(default_factory=CommitPolicy)


def load_config(root: Path) -> RippleConfig:
    """Load configuration for the workspace at root.

    ripple.toml takes precedence over [tool.ripple] in pyproject.toml.

    Raises:
        ConfigError: If the settings fail validation.
    """
    raw: dict = {}
    config_file = root / CONFIG_FILE
    pyproject = root / "pyproject.toml"
    if config_file.exists():
        raw = load_toml(config_file).unwrap()
        source = config_file
    elif pyproject.exists():
        raw = get_tool_table(load_toml(pyproject), "ripple")
        source = pyproject
    else:
        return RippleConfig()

    try:
        return RippleConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid ripple configuration in {source}:\n{exc}") from exc
