"""
Environment configuration schema for an mpc-recovery deployment.

Defines the immutable record handed to the external provisioning engine.
The record is created once on load and is read-only thereafter. Secret ids
are opaque references: they are validated for shape only and are never
resolved by this package.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from recovery_env.app.schemas.types import (
    DockerImage,
    DockerImageRef,
    HttpUrlText,
    Identifier,
    NonEmptyStr,
    OpenTelemetryLevel,
    SecretId,
)


# ---------------------------------------------------------------------------
# Signers
# ---------------------------------------------------------------------------


class SignerConfig(BaseModel):
    """
    Key material references for one signer of the recovery service.

    The position of a SignerConfig inside EnvironmentConfig.signer_configs
    is the signer index.
    """

    cipher_key_secret_id: SecretId
    sk_share_secret_id: SecretId

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class EnvironmentConfig(BaseModel):
    """
    Validated variable assignments for one deployment environment.
    """

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    env: Identifier
    project: Identifier
    docker_image: DockerImage

    # ------------------------------------------------------------------
    # Account creation
    # ------------------------------------------------------------------

    account_creator_id: NonEmptyStr
    account_creator_sk_secret_id: SecretId
    fast_auth_partners_secret_id: SecretId

    # ------------------------------------------------------------------
    # Signers (order is the signer index)
    # ------------------------------------------------------------------

    signer_configs: Tuple[SignerConfig, ...] = Field(..., min_length=1)

    # ------------------------------------------------------------------
    # External endpoints and telemetry
    # ------------------------------------------------------------------

    jwt_signature_pk_url: HttpUrlText
    otlp_endpoint: HttpUrlText
    opentelemetry_level: OpenTelemetryLevel

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("opentelemetry_level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("signer_configs")
    @classmethod
    def distinct_signer_shares(
        cls, v: Tuple[SignerConfig, ...], info: ValidationInfo
    ) -> Tuple[SignerConfig, ...]:
        max_signers = (info.context or {}).get("max_signers")
        if max_signers is not None and len(v) > max_signers:
            raise ValueError(
                f"{len(v)} signers configured, at most {max_signers} allowed"
            )

        seen = {}
        for index, signer in enumerate(v):
            previous = seen.setdefault(signer.sk_share_secret_id, index)
            if previous != index:
                raise ValueError(
                    f"signer {index} reuses sk_share_secret_id of signer {previous}"
                )
        return v

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------

    @property
    def image(self) -> DockerImageRef:
        return DockerImageRef.parse(self.docker_image)

    @property
    def signer_count(self) -> int:
        return len(self.signer_configs)

    def signer(self, index: int) -> SignerConfig:
        if not 0 <= index < len(self.signer_configs):
            raise IndexError(
                f"signer index {index} out of range "
                f"(0..{len(self.signer_configs) - 1})"
            )
        return self.signer_configs[index]

    def secret_ids(self) -> List[str]:
        """
        All secret references in declaration order.

        Account-level secrets come first, followed by each signer's cipher
        key and secret-key share.
        """
        ids = [
            self.account_creator_sk_secret_id,
            self.fast_auth_partners_secret_id,
        ]
        for signer in self.signer_configs:
            ids.append(signer.cipher_key_secret_id)
            ids.append(signer.sk_share_secret_id)
        return ids


# Top-level variable names, in the order they are written out.
VARIABLE_NAMES: Tuple[str, ...] = tuple(EnvironmentConfig.model_fields)
