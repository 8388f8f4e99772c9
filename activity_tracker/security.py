"""Password hashing and bearer token helpers."""
import time

from authlib.jose import jwt
from authlib.jose.errors import JoseError
from werkzeug.security import generate_password_hash, check_password_hash

from activity_tracker.errors import Unauthorized

MIN_PASSWORD_LENGTH = 6


def hash_password(plain):
    return generate_password_hash(plain)


def verify_password(password_hash, plain):
    if not password_hash or not isinstance(plain, str):
        return False
    return check_password_hash(password_hash, plain)


def create_access_token(user, secret, expires_in):
    now = int(time.time())
    payload = {
        'sub': str(user.id),
        'role': user.role,
        'iat': now,
        'exp': now + expires_in,
    }
    token = jwt.encode({'alg': 'HS256'}, payload, secret)
    return token.decode('utf-8')


def decode_access_token(token, secret):
    """Return the validated claims; raises Unauthorized for any bad token."""
    try:
        claims = jwt.decode(token, secret)
        claims.validate()
    except JoseError as exc:
        raise Unauthorized(f'Invalid or expired token: {exc.error}')
    except ValueError:
        raise Unauthorized('Malformed token')
    if 'sub' not in claims:
        raise Unauthorized('Token has no subject')
    return claims
