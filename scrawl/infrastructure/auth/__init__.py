"""认证基础设施"""

from scrawl.infrastructure.auth.jwt_credential_service import JWTCredentialService

__all__ = ["JWTCredentialService"]
