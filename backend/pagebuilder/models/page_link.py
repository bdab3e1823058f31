from pagebuilder.extensions import db

class PageLink(db.Model):
    """A page made visible on another site without copying it."""
    __tablename__ = "page_link"

    page_id = db.Column(
        db.Integer, db.ForeignKey("page.id", ondelete="CASCADE"), primary_key=True
    )
    to_site_id = db.Column(db.Integer, db.ForeignKey("hostsite.id"), primary_key=True)
    from_site_id = db.Column(
        db.Integer, db.ForeignKey("hostsite.id"), nullable=False, index=True
    )
