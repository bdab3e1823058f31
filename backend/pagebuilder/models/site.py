from pagebuilder.extensions import db
from .base import BaseModel

class Site(BaseModel):
    """A hostsite: a tenant owning its own set of pages."""
    __tablename__ = "hostsite"

    name = db.Column(db.String(255), nullable=False)
    data_directory = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    organization_id = db.Column(
        db.Integer, db.ForeignKey("organization.id"), nullable=True, index=True
    )
    organization = db.relationship("Organization", back_populates="sites")

    def __repr__(self):
        return f"<Site {self.id} {self.name}>"
