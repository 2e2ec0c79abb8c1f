from urllib.parse import urlparse

from onelogin.saml2.auth import OneLogin_Saml2_Auth
from onelogin.saml2.idp_metadata_parser import OneLogin_Saml2_IdPMetadataParser
from onelogin.saml2.settings import OneLogin_Saml2_Settings

from campusflow.core import config
from campusflow.schemas.profile_schemas import SignInIdentity

POST_BINDING = "urn:oasis:names:tc:SAML:2.0:bindings:HTTP-POST"
REDIRECT_BINDING = "urn:oasis:names:tc:SAML:2.0:bindings:HTTP-Redirect"

# Attribute names differ between identity providers; the first match wins.
EMAIL_ATTRIBUTES = ("email", "Email", "mail")
NAME_ATTRIBUTES = ("full_name", "displayName", "cn")
GIVEN_NAME_ATTRIBUTES = ("FirstName", "givenName")
SURNAME_ATTRIBUTES = ("LastName", "sn", "surname")
ROLE_ATTRIBUTES = ("role", "Role", "eduPersonAffiliation")
DEPARTMENT_ATTRIBUTES = ("department", "Department", "ou")


def _service_provider() -> dict:
    return {
        "entityId": config.SAML_SP_ENTITY_ID,
        "assertionConsumerService": {"url": config.SAML_SP_ACS_URL, "binding": POST_BINDING},
        "singleLogoutService": {"url": config.SAML_SP_SLO_URL, "binding": REDIRECT_BINDING},
        "x509cert": config.SAML_SP_X509CERT,
        "privateKey": config.SAML_SP_PRIVATE_KEY,
        "NameIDFormat": config.SAML_SP_NAMEID_FORMAT,
    }


def _identity_provider() -> dict:
    return {
        "entityId": config.SAML_IDP_ENTITY_ID,
        "singleSignOnService": {"url": config.SAML_IDP_SSO_URL, "binding": REDIRECT_BINDING},
        "singleLogoutService": {"url": config.SAML_IDP_SLO_URL, "binding": REDIRECT_BINDING},
        "x509cert": config.SAML_IDP_X509CERT,
    }


def build_saml_settings() -> dict:
    settings = {
        "strict": config.SAML_STRICT,
        "debug": config.SAML_DEBUG,
        "sp": _service_provider(),
        "idp": _identity_provider(),
    }
    if config.SAML_IDP_METADATA_PATH:
        remote = OneLogin_Saml2_IdPMetadataParser.parse_remote(config.SAML_IDP_METADATA_PATH)
        return OneLogin_Saml2_IdPMetadataParser.merge_settings(settings, remote)
    return settings


def init_saml_auth(request_data: dict) -> OneLogin_Saml2_Auth:
    return OneLogin_Saml2_Auth(request_data, build_saml_settings())


def build_request_data(url: str, host: str, query_params: dict, form_data: dict) -> dict:
    parsed = urlparse(url)
    https = parsed.scheme == "https"
    port = parsed.port or (443 if https else 80)
    return {
        "https": "on" if https else "off",
        "http_host": host or parsed.hostname or "",
        "server_port": str(port),
        "script_name": parsed.path,
        "get_data": query_params,
        "post_data": form_data,
    }


def _first(attributes: dict, names: tuple[str, ...]) -> str | None:
    for name in names:
        values = attributes.get(name) or []
        if values and values[0]:
            return values[0]
    return None


def extract_identity(attributes: dict, name_id: str | None) -> SignInIdentity:
    """Map an assertion's attributes onto the profile created at first sign-in."""
    email = _first(attributes, EMAIL_ATTRIBUTES) or name_id or ""

    full_name = _first(attributes, NAME_ATTRIBUTES)
    if not full_name:
        parts = [_first(attributes, GIVEN_NAME_ATTRIBUTES), _first(attributes, SURNAME_ATTRIBUTES)]
        full_name = " ".join(part for part in parts if part)

    return SignInIdentity(
        email=email,
        subject=name_id or email,
        full_name=full_name or "User",
        role=_first(attributes, ROLE_ATTRIBUTES) or "student",
        department=_first(attributes, DEPARTMENT_ATTRIBUTES),
    )


def generate_sp_metadata() -> tuple[str, list[str]]:
    settings = OneLogin_Saml2_Settings(build_saml_settings(), sp_validation_only=True)
    metadata = settings.get_sp_metadata()
    errors = settings.validate_metadata(metadata)
    return metadata, errors
