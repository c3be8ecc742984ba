from datetime import date
from sqlalchemy.exc import IntegrityError
from models.job import JobPost, JobApplication, APPLICATION_STATUSES
from services.identity import IdentityResolver
from services.notifications import JobApplicationReceived
from utils.errors import ValidationError, AuthorizationError, NotFoundError, ConflictError
import logging

logger = logging.getLogger(__name__)

JOB_FIELDS = (
    'title', 'company', 'location', 'job_type', 'industry', 'description',
    'requirements', 'salary_range', 'hours_per_week'
)


class JobService:

    def __init__(self, session, notifier=None):
        self.session = session
        self.notifier = notifier

    def get_job(self, job_id):
        job = self.session.get(JobPost, job_id)
        if not job:
            raise NotFoundError('Job not found')
        return job

    def create_job_post(self, acting, data):
        IdentityResolver.require_profile(acting)

        values = {}
        for field in JOB_FIELDS:
            value = data.get(field)
            values[field] = value.strip() if isinstance(value, str) and value.strip() else None

        if not values['title'] or not values['company']:
            raise ValidationError('title and company are required')

        deadline = data.get('application_deadline')
        if deadline:
            try:
                values['application_deadline'] = date.fromisoformat(str(deadline))
            except ValueError:
                raise ValidationError('application_deadline must be an ISO date (YYYY-MM-DD)')

        job = JobPost(posted_by=acting.user_id, is_active=True, **values)
        self.session.add(job)
        self.session.commit()

        logger.info(f"Job post {job.id} created by {acting.user_id}")
        return job

    def list_job_posts(self, acting):
        """All posts, newest first, with application counts and the caller's own status"""
        jobs = self.session.query(JobPost).order_by(JobPost.created_at.desc(), JobPost.id.desc()).all()
        job_ids = [job.id for job in jobs]

        applications = []
        if job_ids:
            applications = self.session.query(
                JobApplication.job_id, JobApplication.applicant_id
            ).filter(JobApplication.job_id.in_(job_ids)).all()

        results = []
        for job in jobs:
            applicants = [a.applicant_id for a in applications if a.job_id == job.id]
            data = job.to_dict()
            data['application_count'] = len(applicants)
            data['user_applied'] = acting.user_id in applicants
            results.append(data)
        return results

    def submit_application(self, acting, job_id, cover_letter=None):
        IdentityResolver.require_profile(acting)
        job = self.get_job(job_id)

        if not job.is_active:
            raise ValidationError('This job is no longer accepting applications')
        if job.posted_by == acting.user_id:
            raise ValidationError('You cannot apply to your own job post')

        existing = self.session.query(JobApplication).filter_by(
            job_id=job.id, applicant_id=acting.user_id
        ).first()
        if existing:
            raise ConflictError('You have already applied to this job')

        application = JobApplication(
            job_id=job.id,
            applicant_id=acting.user_id,
            cover_letter=(cover_letter or '').strip() or None,
            status='pending'
        )
        self.session.add(application)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError('You have already applied to this job')

        logger.info(f"Application {application.id} submitted to job {job.id} by {acting.user_id}")

        if self.notifier:
            self.notifier.dispatch(JobApplicationReceived(
                recipient_id=job.posted_by,
                job_id=job.id,
                job_title=job.title,
                application_id=application.id,
                applicant_id=acting.user_id,
                applicant_name=acting.display_name
            ))

        return application

    def update_application_status(self, acting, application_id, status):
        if status not in APPLICATION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(APPLICATION_STATUSES)}")

        application = self.session.get(JobApplication, application_id)
        if not application:
            raise NotFoundError('Application not found')
        if application.job.posted_by != acting.user_id:
            raise AuthorizationError('Only the job poster can update application status')

        # No transition table: the poster may move freely between statuses
        application.status = status
        self.session.commit()

        logger.info(f"Application {application.id} set to {status} by {acting.user_id}")
        return application

    def list_applications_for_job(self, acting, job_id):
        job = self.get_job(job_id)
        if job.posted_by != acting.user_id:
            raise AuthorizationError('Only the job poster can view applications')

        return self.session.query(JobApplication).filter_by(job_id=job.id).order_by(
            JobApplication.applied_at.desc(), JobApplication.id.desc()
        ).all()
