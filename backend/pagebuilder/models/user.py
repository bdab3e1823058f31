from werkzeug.security import generate_password_hash, check_password_hash
from pagebuilder.extensions import db
from .base import BaseModel
from .site_mixin import SiteMixin

class User(BaseModel, SiteMixin):
    __tablename__ = 'user'

    login = db.Column(db.String(120), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)

    role = db.Column(db.String(50), nullable=False, default='editor')
    is_active = db.Column(db.Boolean, default=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
