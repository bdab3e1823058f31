from pagebuilder.extensions import db
from .base import BaseModel

class Organization(BaseModel):
    __tablename__ = "organization"

    name = db.Column(db.String(255), nullable=False, index=True)

    sites = db.relationship("Site", back_populates="organization")
