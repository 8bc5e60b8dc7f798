from custody import db
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from datetime import datetime
import secrets
from custody.buisness.core.data_insertion_mixin import DataInsertionMixin


class User(UserMixin, DataInsertionMixin, db.Model):
    """
    API caller. Authenticates with a bearer token of the form "<id>.<secret>";
    only a hash of the secret is stored.
    """
    __tablename__ = 'users'

    _hidden_columns = ('api_token_hash',)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    api_token_hash = db.Column(db.String(255), nullable=True)
    # Comma separated action names, e.g. "indent.create,indent.approve"
    permissions = db.Column(db.Text, default='')
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)
    is_system = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def issue_api_token(self):
        """Generate a new token, store its hash and return the plain token (shown once)."""
        if self.id is None:
            db.session.flush()
        secret = secrets.token_urlsafe(32)
        self.api_token_hash = generate_password_hash(secret)
        return f"{self.id}.{secret}"

    def check_api_token(self, secret):
        if not self.api_token_hash:
            return False
        return check_password_hash(self.api_token_hash, secret)

    @property
    def permission_set(self):
        return {p.strip() for p in (self.permissions or '').split(',') if p.strip()}

    def grant(self, *actions):
        self.permissions = ','.join(sorted(self.permission_set | set(actions)))

    def has_permission(self, action):
        if not self.is_active:
            return False
        if self.is_admin:
            return True
        granted = self.permission_set
        # "indent.*" grants every indent action
        return action in granted or f"{action.split('.', 1)[0]}.*" in granted

    def __repr__(self):
        return f'<User {self.username}>'
