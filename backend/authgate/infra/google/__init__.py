from .google_identity_provider import GoogleIdentityProvider

__all__ = ["GoogleIdentityProvider"]
