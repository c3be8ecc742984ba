from functools import wraps
from flask import jsonify, g
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, get_jwt
from extensions import db
from services.identity import IdentityResolver


def require_session():
    """
    Authentication decorator for Supabase-issued access tokens
    - Validates the JWT signature and expiry locally (flask-jwt-extended)
    - Resolves the principal to its profile exactly once
    - Exposes the result as ``g.acting`` for the route to pass into services
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                verify_jwt_in_request()
                user_id = get_jwt_identity()
                claims = get_jwt()
            except Exception as e:
                return jsonify({
                    'error': f'Authentication failed: {str(e)}',
                    'authenticated': False
                }), 401

            if not user_id:
                return jsonify({
                    'error': 'Token has no subject',
                    'authenticated': False
                }), 401

            g.acting = IdentityResolver(db.session).resolve(user_id, email=claims.get('email'))
            return f(*args, **kwargs)

        return decorated_function
    return decorator
