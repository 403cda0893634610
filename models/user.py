from dating_backend import db
from utils.helpers import calculate_age, format_datetime, utcnow

ADMIN_ROLES = ('admin', 'superadmin')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    mobile_number = db.Column(db.String(30), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    birthdate = db.Column(db.Date, nullable=False)
    gender = db.Column(db.String(30), nullable=False)
    sexual_orientation = db.Column(db.String(30), nullable=False)
    gender_interest = db.Column(db.String(30), nullable=False)
    bio = db.Column(db.Text, nullable=False, default='')
    country = db.Column(db.String(100))
    state = db.Column(db.String(100))
    city = db.Column(db.String(100))
    school = db.Column(db.String(150))
    location = db.Column(db.String(255))
    role = db.Column(db.String(20), nullable=False, default='user')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    photos = db.relationship(
        'Photo', backref='user', order_by='Photo.position',
        cascade='all, delete-orphan', lazy='select'
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self):
        return (self.role or '').lower() in ADMIN_ROLES

    def age(self, today=None):
        return calculate_age(self.birthdate, today)

    @property
    def primary_photo(self):
        """Flagged primary photo, else the first by position"""
        if not self.photos:
            return None
        for photo in self.photos:
            if photo.is_primary:
                return photo
        return self.photos[0]

    @property
    def primary_photo_url(self):
        photo = self.primary_photo
        return photo.url if photo else None

    def __repr__(self):
        return f'<User {self.id} {self.email}>'

    def to_dict(self, include_private=False):
        """Convert to dictionary for JSON serialization.

        Contact details only go to the user themselves and admins.
        """
        data = {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'birthdate': self.birthdate.isoformat() if self.birthdate else None,
            'age': self.age(),
            'gender': self.gender,
            'gender_interest': self.gender_interest,
            'sexual_orientation': self.sexual_orientation,
            'bio': self.bio,
            'country': self.country,
            'state': self.state,
            'city': self.city,
            'school': self.school,
            'location': self.location,
            'primary_photo_url': self.primary_photo_url,
            'photos': [photo.to_dict() for photo in self.photos],
            'role': self.role,
        }
        if include_private:
            data.update({
                'email': self.email,
                'mobile_number': self.mobile_number,
                'created_at': format_datetime(self.created_at),
            })
        return data
