# Session gate: JWT session tokens, logout revocation and credential checks
import logging
from datetime import datetime, timezone

from flask import current_app
from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager, jwt_required

from errors import Unauthenticated
from models import db, RevokedToken, utcnow

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()
jwt = JWTManager()


def hash_credential(secret):
    """Return the value stored for ``secret``.

    Credentials are kept verbatim unless ``HASH_PASSWORDS`` is set. This is a
    known weakness kept for compatibility with existing accounts.
    """
    if current_app.config.get('HASH_PASSWORDS'):
        return bcrypt.generate_password_hash(secret).decode('utf-8')
    return secret


def check_credential(stored, supplied):
    if current_app.config.get('HASH_PASSWORDS'):
        return bcrypt.check_password_hash(stored, supplied)
    return stored == supplied


def revoke_token(jwt_payload):
    """Record a logged-out token and drop records of tokens that have expired."""
    db.session.query(RevokedToken)\
        .filter(RevokedToken.expires_at < utcnow())\
        .delete(synchronize_session=False)
    db.session.add(RevokedToken(
        jti=jwt_payload["jti"],
        expires_at=datetime.fromtimestamp(jwt_payload["exp"], timezone.utc)
    ))
    db.session.commit()


def login_required(fn):
    """Reject the request with 401 unless it carries a live session token."""
    return jwt_required()(fn)


def _auth_required_response(*_args):
    return Unauthenticated().to_response()


@jwt.user_identity_loader
def user_identity_lookup(user):
    return str(user.user_id)


@jwt.user_lookup_loader
def user_lookup_callback(_jwt_header, jwt_data):
    from stores import UserStore
    identity = jwt_data["sub"]
    return UserStore(db.session).get(int(identity))


@jwt.token_in_blocklist_loader
def check_if_token_revoked(_jwt_header, jwt_payload):
    jti = jwt_payload["jti"]
    return db.session.query(RevokedToken.token_id).filter(RevokedToken.jti == jti).scalar() is not None


@jwt.unauthorized_loader
def missing_token_callback(reason):
    logger.debug("Rejected request without session token: %s", reason)
    return _auth_required_response()


@jwt.invalid_token_loader
def invalid_token_callback(reason):
    logger.info("Rejected invalid session token: %s", reason)
    return _auth_required_response()


jwt.expired_token_loader(_auth_required_response)
jwt.revoked_token_loader(_auth_required_response)
jwt.user_lookup_error_loader(_auth_required_response)
