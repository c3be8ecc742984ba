from flask import Blueprint, request, jsonify
from extensions import db
from models.profile import Profile
from services.profiles import ProfileService
from services.supabase_client import get_supabase_auth
from utils.errors import DependencyError
import logging

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    data = request.get_json(silent=True) or {}
    return (data.get('access_token') or '').strip()


@auth_bp.route('/session', methods=['POST'])
def exchange_session():
    """Verify a Supabase access token and tell the client where to go next"""
    access_token = _bearer_token()
    if not access_token:
        return jsonify({'error': 'Access token required', 'authenticated': False}), 401

    supabase_auth = get_supabase_auth()
    if supabase_auth is None:
        raise DependencyError('Supabase authentication is not configured')

    supabase_user = supabase_auth.verify_token(access_token)
    if not supabase_user:
        return jsonify({'error': 'Invalid or expired token', 'authenticated': False}), 401

    identity = supabase_auth.session_from_user(supabase_user)
    profile = db.session.get(Profile, identity['id'])
    step = ProfileService(db.session).onboarding_step(identity['id'])

    logger.info(f"Session exchanged for {identity['id']} -> {step}")

    return jsonify({
        'authenticated': True,
        'user': identity,
        'profile': profile.to_dict() if profile else None,
        'onboarding_step': step
    }), 200
