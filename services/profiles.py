from models.profile import Profile, UserInterest
from services.connections import ConnectionService, compute_status
from services.identity import IdentityResolver
from utils.errors import ValidationError
from utils.timeutil import utcnow
import logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('full_name', 'major', 'graduation_year')
OPTIONAL_FIELDS = (
    'email', 'student_id', 'phone', 'bio', 'location', 'gpa',
    'linkedin_url', 'github_url', 'portfolio_url',
    'profile_picture_url', 'resume_url'
)
MAX_INTERESTS = 30


def _clean(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _parse_graduation_year(value):
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise ValidationError('graduation_year must be a year')
    if year < 1900 or year > 2100:
        raise ValidationError('graduation_year must be a year')
    return year


def _parse_gpa(value):
    if value is None:
        return None
    try:
        gpa = float(value)
    except (TypeError, ValueError):
        raise ValidationError('gpa must be a number')
    if gpa < 0 or gpa > 4:
        raise ValidationError('gpa must be between 0 and 4')
    return gpa


class ProfileService:

    def __init__(self, session, connections=None):
        self.session = session
        self.connections = connections or ConnectionService(session)

    def upsert_profile(self, acting, data):
        """Create or update the acting identity's own profile.

        Missing keys keep their stored value, so the same call serves the
        first-time setup form and later edits. The merged record must have
        every required field.
        """
        profile = acting.profile or self.session.get(Profile, acting.user_id)
        fields = {}

        for field in REQUIRED_FIELDS + OPTIONAL_FIELDS:
            if field in data:
                fields[field] = _clean(data[field])
            elif profile is not None:
                fields[field] = getattr(profile, field)
            else:
                fields[field] = None

        missing = [f for f in REQUIRED_FIELDS if fields[f] in (None, '')]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        fields['graduation_year'] = _parse_graduation_year(fields['graduation_year'])
        fields['gpa'] = _parse_gpa(fields['gpa'])
        if not fields['email']:
            fields['email'] = acting.email

        if profile is None:
            profile = Profile(id=acting.user_id)
            self.session.add(profile)

        for field, value in fields.items():
            setattr(profile, field, value)
        profile.is_profile_complete = True
        profile.updated_at = utcnow()

        self.session.commit()
        logger.info(f"Profile saved for {acting.user_id}")
        return profile

    def set_interests(self, acting, values):
        IdentityResolver.require_profile(acting)
        if not isinstance(values, list):
            raise ValidationError('interests must be a list')

        cleaned = []
        for value in values:
            value = _clean(value) if isinstance(value, str) else None
            if value and value not in cleaned:
                cleaned.append(value)

        if not cleaned:
            raise ValidationError('Please select at least one interest')
        if len(cleaned) > MAX_INTERESTS:
            raise ValidationError(f'At most {MAX_INTERESTS} interests are allowed')

        self.session.query(UserInterest).filter_by(user_id=acting.user_id).delete()
        for value in cleaned:
            self.session.add(UserInterest(user_id=acting.user_id, value=value))
        self.session.commit()

        return cleaned

    def onboarding_step(self, principal_id):
        """Where a freshly signed-in user should land"""
        profile = self.session.get(Profile, str(principal_id))
        if not profile or not profile.is_profile_complete:
            return 'profile_setup'

        has_interests = self.session.query(UserInterest.id).filter_by(user_id=profile.id).first()
        if not has_interests:
            return 'interests_setup'
        return 'dashboard'

    def people_query(self, acting):
        return self.session.query(Profile).filter(
            Profile.id != acting.user_id
        ).order_by(Profile.created_at.desc(), Profile.id.asc())

    def describe_people(self, acting, profiles):
        connections = self.connections.connections_for(acting.user_id)
        people = []
        for profile in profiles:
            data = profile.to_summary()
            data.update({
                'bio': profile.bio,
                'location': profile.location,
                'interests': profile.interest_values(),
                'connection_status': compute_status(acting.user_id, profile.id, connections)
            })
            people.append(data)
        return people
