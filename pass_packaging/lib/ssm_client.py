"""SSM client for reading pass signing credentials from AWS Parameter Store."""

import boto3
from botocore.exceptions import ClientError

from .credentials import InlineContent, SigningCredentials


class SSMClient:
    """SSM client for reading pass signing credentials (writes handled by Terraform)."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize SSM client.

        Args:
            region: AWS region for SSM client
        """
        self.client = boto3.client("ssm", region_name=region)

    @staticmethod
    def parameter_prefix(project_name: str, account: str) -> str:
        return f"/{project_name}/{account}/passkit"

    def _get_value(self, name: str, decrypt: bool) -> str:
        response = self.client.get_parameter(Name=name, WithDecryption=decrypt)
        return response["Parameter"]["Value"]

    def get_signing_credentials(self, project_name: str, account: str) -> SigningCredentials:
        """Fetch WWDR certificate, signer certificate, key and key password from SSM.

        The key password parameter is optional; when absent the key is
        treated as unencrypted.

        Args:
            project_name: Project name prefix (e.g., 'wallet-passes')
            account: Account/environment name (e.g., 'sandbox')

        Returns:
            SigningCredentials with InlineContent sources

        Raises:
            ValueError: If a required parameter is not found
        """
        prefix = self.parameter_prefix(project_name, account)
        wwdr_path = f"{prefix}/wwdr-certificate"
        cert_path = f"{prefix}/certificate"
        key_path = f"{prefix}/private-key"
        password_path = f"{prefix}/key-password"

        try:
            wwdr_pem = self._get_value(wwdr_path, decrypt=False)
            cert_pem = self._get_value(cert_path, decrypt=False)
            key_pem = self._get_value(key_path, decrypt=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ParameterNotFound":
                raise ValueError(
                    f"Pass signing credentials not found in SSM. "
                    f"Paths checked: {wwdr_path}, {cert_path}, {key_path}"
                ) from e
            raise

        try:
            key_password: str | None = self._get_value(password_path, decrypt=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code != "ParameterNotFound":
                raise
            key_password = None

        return SigningCredentials(
            wwdr=InlineContent(wwdr_pem.encode("utf-8")),
            certificate=InlineContent(cert_pem.encode("utf-8")),
            private_key=InlineContent(key_pem.encode("utf-8")),
            key_password=key_password,
        )
