from .flask_jwt_token_issuer import JWTTokenIssuer

__all__ = ["JWTTokenIssuer"]
