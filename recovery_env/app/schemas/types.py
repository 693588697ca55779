"""
Reusable field types for environment configuration.

Each alias bundles a base type with the format constraint it must satisfy,
so models can declare intent rather than repeat validation logic.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)


# -------------------------------------------------------------------------
# Identifiers and opaque references
# -------------------------------------------------------------------------

Identifier = Annotated[
    str,
    Field(
        min_length=1,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9_-]*$",
        description="Environment or project identifier",
    ),
]

NonEmptyStr = Annotated[str, Field(min_length=1)]

SecretId = Annotated[
    str,
    Field(
        min_length=1,
        pattern=r"^\S+$",
        description=(
            "Opaque secret-manager reference. "
            "Resolved by the external secret store, never dereferenced here."
        ),
    ),
]


# -------------------------------------------------------------------------
# URLs (syntactic validation only, original text preserved)
# -------------------------------------------------------------------------

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _check_http_url(value: str) -> str:
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        raise ValueError(f"not a valid http(s) URL: {reason}") from None
    return value


HttpUrlText = Annotated[
    str,
    Field(min_length=1),
    AfterValidator(_check_http_url),
]


# -------------------------------------------------------------------------
# Container image references
# -------------------------------------------------------------------------

_DOCKER_IMAGE_PATTERN = re.compile(
    r"^(?P<registry>"
    r"(?:localhost|[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+)(?::[0-9]+)?"
    r"|[A-Za-z0-9-]+:[0-9]+"
    r")"
    r"/(?P<repository>"
    r"[a-z0-9]+(?:[._-]+[a-z0-9]+)*"
    r"(?:/[a-z0-9]+(?:[._-]+[a-z0-9]+)*)*"
    r")"
    r":(?P<tag>[A-Za-z0-9_][A-Za-z0-9_.-]{0,127})$"
)


class DockerImageRef(BaseModel):
    """A parsed `registry/path:tag` container image reference."""

    registry: str
    repository: str
    tag: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, value: str) -> "DockerImageRef":
        match = _DOCKER_IMAGE_PATTERN.match(value)
        if match is None:
            raise ValueError(
                f"'{value}' is not a container image reference of the form "
                "registry/path:tag"
            )
        return cls(**match.groupdict())

    def __str__(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"


def _check_docker_image(value: str) -> str:
    DockerImageRef.parse(value)
    return value


DockerImage = Annotated[
    str,
    Field(min_length=1),
    AfterValidator(_check_docker_image),
]


# -------------------------------------------------------------------------
# Telemetry
# -------------------------------------------------------------------------

class OpenTelemetryLevel(str, Enum):
    """
    Verbosity of spans and events exported over OTLP.

    Values follow the level names understood by the recovery service's
    tracing subscriber, from least to most verbose.
    """

    OFF = "off"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"
