import logging

import jwt
from flask import current_app

logger = logging.getLogger(__name__)

# Tokens are issued by the portal's auth service; this side only verifies them

def decode_jwt(token):
    """Decode and validate JWT token. Returns None when it is expired or invalid."""
    try:
        return jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.info("Token expired")
        return None
    except jwt.InvalidTokenError:
        logger.info("Invalid token provided")
        return None
