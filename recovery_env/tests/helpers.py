from pathlib import Path


ENVIRONMENTS_DIR = Path(__file__).resolve().parents[1] / "environments"
DEV_TFVARS = ENVIRONMENTS_DIR / "dev.tfvars"


def make_signer(index: int) -> dict:
    return {
        "cipher_key_secret_id": f"mpc-cipher-{index}-test",
        "sk_share_secret_id": f"mpc-sk-share-{index}-test",
    }


def make_variables(*, signers: int = 3, **overrides) -> dict:
    """
    Well-formed raw variables for a test environment.

    Keyword overrides replace individual variables; pass a value of
    `None` to drop a variable entirely.
    """
    variables = {
        "env": "test",
        "project": "mpc-recovery-test",
        "docker_image": (
            "us-east1-docker.pkg.dev/mpc-recovery-test/mpc-recovery/"
            "mpc-recovery-test:0.4.1"
        ),
        "account_creator_id": "creator.testnet",
        "account_creator_sk_secret_id": "account-creator-sk-test",
        "fast_auth_partners_secret_id": "fast-auth-partners-test",
        "signer_configs": [make_signer(i) for i in range(signers)],
        "jwt_signature_pk_url": "https://keys.example.com/jwk.json",
        "otlp_endpoint": "http://otel-collector:4317",
        "opentelemetry_level": "info",
    }
    for name, value in overrides.items():
        if value is None:
            variables.pop(name, None)
        else:
            variables[name] = value
    return variables


def make_loader(**settings):
    """ConfigLoader with explicit settings, isolated from any local .env file."""
    from recovery_env.app.config import LoaderSettings
    from recovery_env.app.loader import ConfigLoader

    return ConfigLoader(LoaderSettings(_env_file=None, **settings))
