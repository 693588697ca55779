"""
Write an EnvironmentConfig back out as Terraform variable definitions.

Output reloads into an identical record, in either HCL or JSON form.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from recovery_env.app.schemas.environment import (
    VARIABLE_NAMES,
    EnvironmentConfig,
    SignerConfig,
)


def to_tfvars_dict(config: EnvironmentConfig) -> Dict[str, Any]:
    """Plain mapping using the same keys and shapes as the loader input."""
    data = config.model_dump(mode="json")
    return {name: data[name] for name in VARIABLE_NAMES}


_HCL_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _hcl_escape_char(char: str) -> str:
    if char in _HCL_ESCAPES:
        return _HCL_ESCAPES[char]
    if ord(char) < 0x20 or ord(char) == 0x7F:
        return f"\\u{ord(char):04x}"
    return char


def _hcl_string(value: str) -> str:
    escaped = "".join(_hcl_escape_char(c) for c in value)
    # Template sequences must be doubled or Terraform would interpolate them.
    escaped = escaped.replace("${", "$${").replace("%{", "%%{")
    return f'"{escaped}"'


def _hcl_signer(signer: SignerConfig) -> str:
    pairs = ", ".join(
        f"{name} = {_hcl_string(value)}"
        for name, value in signer.model_dump(mode="json").items()
    )
    return "{ " + pairs + " }"


def dumps_tfvars(config: EnvironmentConfig) -> str:
    """Render the configuration as an HCL `.tfvars` document."""
    data = to_tfvars_dict(config)
    scalars = [name for name in VARIABLE_NAMES if name != "signer_configs"]
    width = max(len(name) for name in scalars)

    lines: List[str] = []
    for name in scalars:
        lines.append(f"{name.ljust(width)} = {_hcl_string(data[name])}")

    signers = [_hcl_signer(s) for s in config.signer_configs]
    lines.append("signer_configs = [")
    lines.append(",\n".join(f"  {s}" for s in signers))
    lines.append("]")

    return "\n".join(lines) + "\n"


def dumps_tfvars_json(config: EnvironmentConfig, *, indent: int = 2) -> str:
    """Render the configuration as a `.tfvars.json` document."""
    return json.dumps(to_tfvars_dict(config), indent=indent) + "\n"
