"""FranceConnect (French national identity provider) implementation."""
from typing import Any, Mapping

from ..exceptions import MissingClaimError
from ..models import CanonicalUser, Environment
from .base import ProviderSpec

# Canonical field -> claim name in the userinfo response
CLAIM_MAP = {
    "id": "sub",
    "given_name": "given_name",
    "family_name": "family_name",
    "gender": "gender",
    "birthplace": "birthplace",
    "birthcountry": "birthcountry",
    "email": "email",
    "preferred_username": "preferred_username",
}


class FranceConnectProvider(ProviderSpec):
    """FranceConnect v2 OpenID Connect implementation."""

    PROD_BASE_URL = "https://oidc.franceconnect.gouv.fr/api/v2"
    TEST_BASE_URL = "https://fcp-low.integ01.dev-franceconnect.fr/api/v2"
    IDENTIFIER = "franceconnect"

    session_token_key = "fc_token_id"
    # Replay protection; FranceConnect rejects authorize calls without a nonce
    nonce_length = 22

    @property
    def identifier(self) -> str:
        return self.IDENTIFIER

    @property
    def display_name(self) -> str:
        return "FranceConnect"

    def resolve_base_url(self, environment: Environment) -> str:
        if environment == Environment.PRODUCTION:
            return self.PROD_BASE_URL
        return self.TEST_BASE_URL

    def extra_authorization_params(self) -> dict[str, str]:
        return {
            "acr_values": "eidas1",
            "prompt": "consent",
        }

    def map_claims(self, claims: Mapping[str, Any]) -> CanonicalUser:
        """
        Map FranceConnect userinfo claims.

        Expected claims:
        - sub: Pseudonymous subject identifier
        - given_name / family_name: Civil names
        - gender, birthplace, birthcountry: Civil status (INSEE codes)
        - email, preferred_username: Contact and usage name
        """
        missing = [claim for claim in CLAIM_MAP.values() if claim not in claims]
        if missing:
            raise MissingClaimError(missing)

        fields = {field_name: claims[claim] for field_name, claim in CLAIM_MAP.items()}
        return CanonicalUser(**fields, raw=dict(claims))
