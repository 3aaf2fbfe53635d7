import secrets
from datetime import timedelta

import bcrypt
from sqlalchemy.exc import IntegrityError

from bulletin.core import db, utcnow, get_config_value, ConflictError, AuthError

ROLES = ('user', 'admin')

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255))
    role = db.Column(db.Enum(*ROLES, name='user_role'), nullable=False, default='user')
    # {name, bio, avatar}; replaced wholesale on update
    profile = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __repr__(self):
        return f"<User {self.username}>"


class UserSession(db.Model):
    __tablename__ = 'user_sessions'

    token = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    @property
    def is_expired(self):
        return self.expires_at <= utcnow()


class AuthDatabase:
    @staticmethod
    def _hash_password(password):
        """Salted bcrypt hash; AuthError for passwords bcrypt cannot take"""
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise AuthError(f'Password too long (max {MAX_PASSWORD_BYTES} bytes)')
        rounds = int(get_config_value('BCRYPT_ROUNDS', 10))
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')

    @staticmethod
    def _verify_password(password, password_hash):
        """Verify password against hash"""
        if not password or not password_hash:
            return False
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    @staticmethod
    def get_user_by_username(username):
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_user_by_id(user_id):
        return db.session.get(User, user_id)

    @staticmethod
    def create_user(username, password, email=None, role='user'):
        """Create a new user, raising ConflictError if the username is taken"""
        if not username or not password:
            raise AuthError('Username and password are required')
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        if AuthDatabase.get_user_by_username(username):
            raise ConflictError('Username taken')

        user = User(
            username=username,
            password=AuthDatabase._hash_password(password),
            email=email,
            role=role,
        )
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            db.session.rollback()
            raise ConflictError('Username taken')
        return user

    @staticmethod
    def verify_user_credentials(username, password):
        """Return the user for valid credentials, raise AuthError otherwise"""
        user = AuthDatabase.get_user_by_username(username) if username else None
        if user is None or not AuthDatabase._verify_password(password, user.password):
            raise AuthError('Invalid credentials')
        return user

    @staticmethod
    def set_role(username, role):
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        user = AuthDatabase.get_user_by_username(username)
        if user is None:
            return None
        user.role = role
        db.session.commit()
        return user

    @staticmethod
    def update_profile(user, name=None, bio=None, avatar=None):
        """Overwrite the profile sub-record; no partial merge"""
        user.profile = {
            'name': name or '',
            'bio': bio or '',
            'avatar': avatar or '',
        }
        db.session.commit()
        return user

    # ----- Server-side sessions -----

    @staticmethod
    def create_session(user_id):
        hours = int(get_config_value('SESSION_LIFETIME_HOURS', 24))
        now = utcnow()
        record = UserSession(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(hours=hours),
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def get_session(token):
        """Return a live session record; expired records are deleted"""
        if not token:
            return None
        record = db.session.get(UserSession, token)
        if record is None:
            return None
        if record.is_expired:
            db.session.delete(record)
            db.session.commit()
            return None
        return record

    @staticmethod
    def delete_session(token):
        if not token:
            return False
        deleted = UserSession.query.filter_by(token=token).delete()
        db.session.commit()
        return deleted > 0
