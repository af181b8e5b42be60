"""Feed credential model."""

import json

from pydantic import BaseModel, ConfigDict, SecretStr


class FeedCredential(BaseModel):
    """Credential for one publish call. Never persisted."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    username: str = ""
    token: SecretStr

    def api_key(self) -> str:
        return self.token.get_secret_value()

    def external_endpoints_json(self) -> str:
        """Body of VSS_NUGET_EXTERNAL_FEED_ENDPOINTS for the credential provider."""
        return json.dumps(
            {
                "endpointCredentials": [
                    {
                        "endpoint": self.endpoint,
                        "username": self.username,
                        "password": self.api_key(),
                    }
                ]
            }
        )
