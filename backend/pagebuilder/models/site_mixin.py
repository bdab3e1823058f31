from pagebuilder.extensions import db

class SiteMixin:
    site_id = db.Column(
        db.Integer,
        db.ForeignKey('hostsite.id'),
        nullable=False,
        index=True
    )
