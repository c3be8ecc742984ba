from flask import Blueprint, request, jsonify, g
from extensions import db
from middleware.auth import require_session
from services.jobs import JobService
from services.notifications import get_notifier

jobs_bp = Blueprint('jobs', __name__)


def _service():
    return JobService(db.session, get_notifier())


@jobs_bp.route('/', methods=['POST'])
@require_session()
def create_job():
    data = request.get_json(silent=True) or {}
    job = _service().create_job_post(g.acting, data)

    return jsonify({
        'message': 'Job created successfully',
        'job': job.to_dict()
    }), 201


@jobs_bp.route('/', methods=['GET'])
@require_session()
def get_jobs():
    jobs = _service().list_job_posts(g.acting)
    return jsonify({'jobs': jobs}), 200


@jobs_bp.route('/<int:job_id>/applications', methods=['POST'])
@require_session()
def submit_application(job_id):
    data = request.get_json(silent=True) or {}
    application = _service().submit_application(g.acting, job_id, data.get('cover_letter'))

    return jsonify({
        'message': 'Application submitted',
        'application': application.to_dict()
    }), 201


@jobs_bp.route('/<int:job_id>/applications', methods=['GET'])
@require_session()
def get_applications(job_id):
    applications = _service().list_applications_for_job(g.acting, job_id)

    return jsonify({
        'applications': [a.to_dict(include_applicant=True) for a in applications],
        'total': len(applications)
    }), 200


@jobs_bp.route('/applications/<int:application_id>', methods=['PUT'])
@require_session()
def update_application_status(application_id):
    data = request.get_json(silent=True) or {}
    application = _service().update_application_status(g.acting, application_id, data.get('status'))

    return jsonify({
        'message': 'Application status updated',
        'application': application.to_dict()
    }), 200
