"""Runtime settings for the account deletion Lambda."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping

import boto3

DEFAULT_REGION = "us-east-1"

SSM_URL_NAME = "supabase-url"
SSM_ANON_KEY_NAME = "supabase-anon-key"
SSM_SERVICE_ROLE_KEY_NAME = "supabase-service-role-key"


@dataclass(slots=True)
class Settings:
    """Supabase endpoint and keys. Missing values are empty strings."""

    url: str = ""
    anon_key: str = ""
    service_role_key: str = ""

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        log: Callable[[str], None] | None = None,
    ) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls(
            url=env.get("SUPABASE_URL") or "",
            anon_key=env.get("SUPABASE_ANON_KEY") or "",
            service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY") or "",
        )

        ssm_base_path = (env.get("SUPABASE_SSM_BASE_PATH") or "").rstrip("/")
        if ssm_base_path:
            region = env.get("AWS_REGION") or DEFAULT_REGION
            params = get_parameters(
                [
                    f"{ssm_base_path}/{SSM_URL_NAME}",
                    f"{ssm_base_path}/{SSM_ANON_KEY_NAME}",
                    f"{ssm_base_path}/{SSM_SERVICE_ROLE_KEY_NAME}",
                ],
                region_name=region,
                log=log,
            )
            settings.url = params.get(SSM_URL_NAME) or settings.url
            settings.anon_key = params.get(SSM_ANON_KEY_NAME) or settings.anon_key
            settings.service_role_key = (
                params.get(SSM_SERVICE_ROLE_KEY_NAME) or settings.service_role_key
            )

        settings.url = settings.url.rstrip("/")
        return settings


def get_parameters(
    parameters: list,
    region_name: str = DEFAULT_REGION,
    *,
    log: Callable[[str], None] | None = None,
) -> dict:
    """
    Fetch parameters from AWS Parameter Store, keyed by the last path segment.

    Names SSM reports as invalid are logged and left out, so the caller's
    own defaults apply for them.
    """
    log_fn = log or print
    try:
        ssm = boto3.session.Session().client("ssm", region_name=region_name)
        response = ssm.get_parameters(Names=parameters, WithDecryption=True)
    except Exception as e:
        raise RuntimeError(f"Failed to fetch parameters: {e}") from e

    invalid = response.get("InvalidParameters") or []
    if invalid:
        log_fn(f"Parameters not found in SSM, using environment values: {', '.join(invalid)}")
    return {param["Name"].split("/")[-1]: param["Value"] for param in response.get("Parameters", [])}
