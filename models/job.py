from extensions import db
from utils.timeutil import utcnow, isoformat

APPLICATION_STATUSES = ('pending', 'reviewed', 'accepted', 'rejected')


class JobPost(db.Model):
    __tablename__ = 'job_posts'

    id = db.Column(db.Integer, primary_key=True)
    posted_by = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    company = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200))
    job_type = db.Column(db.String(50))  # Internship, Full-time, Part-time, Co-op
    industry = db.Column(db.String(100))
    description = db.Column(db.Text)
    requirements = db.Column(db.Text)
    salary_range = db.Column(db.String(100))
    hours_per_week = db.Column(db.String(50))
    application_deadline = db.Column(db.Date)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    poster = db.relationship('Profile', foreign_keys=[posted_by])
    applications = db.relationship('JobApplication', backref='job', lazy='dynamic', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'posted_by': self.posted_by,
            'title': self.title,
            'company': self.company,
            'location': self.location,
            'job_type': self.job_type,
            'industry': self.industry,
            'description': self.description,
            'requirements': self.requirements,
            'salary_range': self.salary_range,
            'hours_per_week': self.hours_per_week,
            'application_deadline': isoformat(self.application_deadline),
            'is_active': self.is_active,
            'created_at': isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<JobPost {self.id}: {self.title}>'


class JobApplication(db.Model):
    __tablename__ = 'applications'
    __table_args__ = (
        db.UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant'),
    )

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey('job_posts.id', ondelete='CASCADE'), nullable=False, index=True)
    applicant_id = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default='pending', nullable=False)  # pending, reviewed, accepted, rejected
    cover_letter = db.Column(db.Text)
    applied_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    applicant = db.relationship('Profile', foreign_keys=[applicant_id])

    def to_dict(self, include_applicant=False):
        data = {
            'id': self.id,
            'job_id': self.job_id,
            'applicant_id': self.applicant_id,
            'status': self.status,
            'cover_letter': self.cover_letter,
            'applied_at': isoformat(self.applied_at)
        }

        if include_applicant:
            data['applicant'] = self.applicant.to_applicant_dict() if self.applicant else None
            data['job'] = {'title': self.job.title, 'company': self.job.company} if self.job else None

        return data

    def __repr__(self):
        return f'<JobApplication {self.id}: job {self.job_id} by {self.applicant_id}>'
