"""
Runtime settings for the environment configuration loader.

Pydantic v2 settings management. Settings are constructed explicitly and
passed to the loader; nothing is cached at module level.
"""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderSettings(BaseSettings):
    """
    Loader behaviour parsed from RECOVERY_ENV_* environment variables.
    """

    # ---------------------------------------------------------------------
    # Validation strictness
    # ---------------------------------------------------------------------

    strict: Annotated[
        bool,
        Field(
            default=False,
            description=(
                "Reject unknown top-level variables instead of ignoring "
                "them with a warning."
            ),
        ),
    ]

    max_signers: Annotated[
        int,
        Field(
            default=16,
            ge=1,
            description="Upper bound on the number of signer_configs entries",
        ),
    ]

    # ---------------------------------------------------------------------
    # Terraform environment variables
    # ---------------------------------------------------------------------

    read_environment: Annotated[
        bool,
        Field(
            default=False,
            description=(
                "Fold TF_VAR_* process environment variables into "
                "load_files() as the lowest-precedence layer."
            ),
        ),
    ]

    tf_var_prefix: Annotated[
        str,
        Field(
            default="TF_VAR_",
            min_length=1,
            description="Prefix Terraform uses for variable environment values",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="RECOVERY_ENV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )
