from flask import Blueprint, request, jsonify, current_app, g
from extensions import db, cache_get, cache_set, cache_delete
from middleware.auth import require_session
from services.profiles import ProfileService
from utils.errors import NotFoundError
from utils.pagination import paginate

profiles_bp = Blueprint('profiles', __name__)


@profiles_bp.route('/me', methods=['GET'])
@require_session()
def get_my_profile():
    """Get current user's profile"""
    acting = g.acting

    cache_key = f"user_profile:{acting.user_id}"
    cached_profile = cache_get(cache_key)
    if cached_profile:
        return jsonify({'profile': cached_profile, 'cached': True}), 200

    if not acting.profile:
        raise NotFoundError('Profile not found')

    profile_data = acting.profile.to_dict()
    cache_set(cache_key, profile_data, expire=current_app.config.get('CACHE_TTL', 300))

    return jsonify({'profile': profile_data}), 200


@profiles_bp.route('/me', methods=['PUT'])
@require_session()
def upsert_my_profile():
    """Create or update current user's profile"""
    data = request.get_json(silent=True) or {}
    is_new = not g.acting.has_profile

    profile = ProfileService(db.session).upsert_profile(g.acting, data)
    cache_delete(f"user_profile:{g.acting.user_id}")

    return jsonify({
        'message': 'Profile created successfully' if is_new else 'Profile updated successfully',
        'profile': profile.to_dict()
    }), 201 if is_new else 200


@profiles_bp.route('/me/interests', methods=['PUT'])
@require_session()
def set_my_interests():
    data = request.get_json(silent=True) or {}
    interests = ProfileService(db.session).set_interests(g.acting, data.get('interests'))
    cache_delete(f"user_profile:{g.acting.user_id}")

    return jsonify({'interests': interests}), 200


@profiles_bp.route('/people', methods=['GET'])
@require_session()
def list_people():
    """Other students, with the connection status relative to the caller"""
    service = ProfileService(db.session)
    result = paginate(
        service.people_query(g.acting),
        default_per_page=current_app.config.get('PEOPLE_PAGE_LIMIT', 20)
    )

    return jsonify({
        'people': service.describe_people(g.acting, result['items']),
        'pagination': result['pagination']
    }), 200
