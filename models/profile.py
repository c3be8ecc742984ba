from extensions import db
from utils.timeutil import utcnow, isoformat


class Profile(db.Model):
    """Mirror of a Supabase auth user; id is the auth principal id."""
    __tablename__ = 'profiles'

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), index=True)
    full_name = db.Column(db.String(200))
    student_id = db.Column(db.String(50))
    phone = db.Column(db.String(30))
    bio = db.Column(db.Text)
    location = db.Column(db.String(200))
    major = db.Column(db.String(120))
    graduation_year = db.Column(db.Integer)
    gpa = db.Column(db.Float)

    # Links and storage paths (opaque strings returned by object storage)
    linkedin_url = db.Column(db.String(500))
    github_url = db.Column(db.String(500))
    portfolio_url = db.Column(db.String(500))
    profile_picture_url = db.Column(db.String(500))
    resume_url = db.Column(db.String(500))

    is_profile_complete = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    interests = db.relationship('UserInterest', backref='profile', lazy='dynamic', cascade='all, delete-orphan')

    def interest_values(self):
        return [i.value for i in self.interests.order_by(UserInterest.id.asc()).all()]

    def to_summary(self):
        """Short form embedded in conversations, connections and people lists"""
        return {
            'id': self.id,
            'full_name': self.full_name,
            'profile_picture_url': self.profile_picture_url,
            'major': self.major,
            'graduation_year': self.graduation_year
        }

    def to_applicant_dict(self):
        data = self.to_summary()
        data.update({
            'email': self.email,
            'gpa': self.gpa,
            'phone': self.phone,
            'bio': self.bio,
            'linkedin_url': self.linkedin_url,
            'github_url': self.github_url,
            'portfolio_url': self.portfolio_url,
            'resume_url': self.resume_url
        })
        return data

    def to_dict(self):
        data = self.to_applicant_dict()
        data.update({
            'student_id': self.student_id,
            'location': self.location,
            'is_profile_complete': self.is_profile_complete,
            'interests': self.interest_values(),
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at)
        })
        return data

    def __repr__(self):
        return f'<Profile {self.id}: {self.full_name}>'


class UserInterest(db.Model):
    __tablename__ = 'user_interests'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'value', name='uq_user_interest_value'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    category = db.Column(db.String(50), default='user_interest')
    value = db.Column(db.String(100), nullable=False)
    priority = db.Column(db.Integer, default=1)
    created_at = db.Column(db.DateTime, default=utcnow)
