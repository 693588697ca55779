"""
Environment configuration loader.

Turns Terraform variable inputs into a validated, immutable
EnvironmentConfig for the external provisioning engine. Loading is a single
synchronous validate-and-return pass: the result is either a complete
record or a ConfigLoadError, and the caller must abort on the latter before
provisioning begins.

Secret ids are never logged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from recovery_env.app.config import LoaderSettings
from recovery_env.app.errors import (
    ConfigLoadError,
    ConfigProblem,
    EmptyListError,
    MalformedValueError,
    MissingFieldError,
)
from recovery_env.app.loader.sources import (
    TFVARS,
    parse_text,
    read_environment,
    read_file,
)
from recovery_env.app.schemas.environment import VARIABLE_NAMES, EnvironmentConfig

logger = logging.getLogger("recovery_env.loader")

PathLike = Union[str, os.PathLike]

# Variables whose TF_VAR_* values are HCL expressions rather than strings.
COMPLEX_VARIABLES = ("signer_configs",)

MISSING = "missing"
EMPTY = "empty"
MALFORMED = "malformed"

# Highest precedence first.
_ERROR_PRECEDENCE = (
    (MISSING, MissingFieldError),
    (EMPTY, EmptyListError),
    (MALFORMED, MalformedValueError),
)


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _is_empty_signer_list(error: Dict[str, Any]) -> bool:
    return error["type"] == "too_short" and tuple(error["loc"]) == ("signer_configs",)


def _classify(error: Dict[str, Any]) -> str:
    if error["type"] == "missing":
        return MISSING
    if _is_empty_signer_list(error):
        return EMPTY
    return MALFORMED


def translate_validation_error(exc: ValidationError) -> ConfigLoadError:
    """
    Map a pydantic ValidationError onto the load error taxonomy.

    All problems are attached; the raised class is chosen by precedence
    missing > empty > malformed.
    """
    errors = [
        error for error in exc.errors()
        # The length check runs after items are validated, so a list whose
        # only signers are invalid is also reported as too short.
        if not (_is_empty_signer_list(error) and error.get("input"))
    ]
    problems = [
        ConfigProblem(
            field=_field_path(error["loc"]),
            kind=_classify(error),
            message=error["msg"],
        )
        for error in errors
    ]

    for kind, error_cls in _ERROR_PRECEDENCE:
        primary = next((p for p in problems if p.kind == kind), None)
        if primary is not None:
            break
    else:  # pragma: no cover
        primary, error_cls = problems[0], MalformedValueError

    summary = "; ".join(str(p) for p in problems)
    return error_cls(
        f"Invalid environment configuration ({len(problems)} problem(s)): {summary}",
        field=primary.field,
        problems=problems,
    )


class ConfigLoader:
    """
    Validate Terraform variable inputs into an EnvironmentConfig.

    The loader holds only its immutable settings; every call is
    independent and the returned record is passed explicitly to the
    provisioning engine.
    """

    def __init__(self, settings: Optional[LoaderSettings] = None) -> None:
        self.settings = settings if settings is not None else LoaderSettings()

    # ------------------------------------------------------------------
    # Core operation
    # ------------------------------------------------------------------

    def load(self, data: Mapping[str, Any], *, source: str = "<mapping>") -> EnvironmentConfig:
        if not isinstance(data, Mapping):
            raise MalformedValueError(
                f"{source}: configuration must be a mapping, "
                f"got {type(data).__name__}",
                field="",
                problems=[
                    ConfigProblem(field="", kind=MALFORMED, message="not a mapping")
                ],
            )

        values = self._known_variables(data, source=source)

        try:
            config = EnvironmentConfig.model_validate(
                values,
                context={"max_signers": self.settings.max_signers},
            )
        except ValidationError as exc:
            error = translate_validation_error(exc)
            logger.warning(
                "environment_config_invalid",
                extra={
                    "source": source,
                    "error": type(error).__name__,
                    "fields": [p.field for p in error.problems],
                },
            )
            raise error from exc

        logger.info(
            "environment_config_loaded",
            extra={
                "source": source,
                "env": config.env,
                "project": config.project,
                "signer_count": config.signer_count,
                "opentelemetry_level": config.opentelemetry_level.value,
            },
        )
        return config

    def _known_variables(self, data: Mapping[str, Any], *, source: str) -> Dict[str, Any]:
        unknown = sorted(str(k) for k in data if k not in VARIABLE_NAMES)
        if unknown:
            if self.settings.strict:
                problems = [
                    ConfigProblem(
                        field=name,
                        kind=MALFORMED,
                        message="unknown variable",
                    )
                    for name in unknown
                ]
                logger.warning(
                    "unknown_variables_rejected",
                    extra={"source": source, "variables": unknown},
                )
                raise MalformedValueError(
                    f"{source}: unknown variables: {', '.join(unknown)}",
                    field=unknown[0],
                    problems=problems,
                )
            logger.warning(
                "unknown_variables_ignored",
                extra={"source": source, "variables": unknown},
            )
        return {k: v for k, v in data.items() if k in VARIABLE_NAMES}

    # ------------------------------------------------------------------
    # Text and file inputs
    # ------------------------------------------------------------------

    def load_text(self, text: str, fmt: str = TFVARS) -> EnvironmentConfig:
        origin = f"<{fmt}>"
        return self.load(parse_text(text, fmt, origin=origin), source=origin)

    def load_file(self, path: PathLike) -> EnvironmentConfig:
        path = Path(path)
        return self.load(read_file(path), source=str(path))

    def load_env(self, environ: Optional[Mapping[str, str]] = None) -> EnvironmentConfig:
        """Load from TF_VAR_* variables alone."""
        values = self._environment_layer(os.environ if environ is None else environ)
        return self.load(values, source="environment")

    def load_files(
        self,
        *paths: PathLike,
        environ: Optional[Mapping[str, str]] = None,
    ) -> EnvironmentConfig:
        """
        Merge variable files with Terraform precedence and load the result.

        TF_VAR_* values (when `environ` is given or settings.read_environment
        is set) form the lowest layer. Files follow in the order given, each
        replacing whole top-level values of the layers before it.
        """
        merged: Dict[str, Any] = {}
        sources: List[str] = []

        if environ is not None or self.settings.read_environment:
            layer = self._environment_layer(os.environ if environ is None else environ)
            self._apply_layer(merged, layer, "environment")
            sources.append("environment")

        for raw_path in paths:
            path = Path(raw_path)
            self._apply_layer(merged, read_file(path), str(path))
            sources.append(str(path))

        return self.load(merged, source=" < ".join(sources) or "<empty>")

    def _environment_layer(self, environ: Mapping[str, str]) -> Dict[str, Any]:
        return read_environment(
            environ,
            VARIABLE_NAMES,
            complex_names=COMPLEX_VARIABLES,
            prefix=self.settings.tf_var_prefix,
        )

    @staticmethod
    def _apply_layer(merged: Dict[str, Any], layer: Mapping[str, Any], source: str) -> None:
        overridden = sorted(k for k in layer if k in merged)
        merged.update(layer)
        logger.debug(
            "config_layer_applied",
            extra={
                "source": source,
                "variables": sorted(layer),
                "overridden": overridden,
            },
        )
