from pagebuilder.extensions import db
from .base import BaseModel
from .site_mixin import SiteMixin

page_tag = db.Table(
    "page_tag",
    db.Column("page_id", db.Integer, db.ForeignKey("page.id", ondelete="CASCADE"), primary_key=True),
    db.Column("tag_id", db.Integer, db.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(BaseModel, SiteMixin):
    __tablename__ = "tag"

    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(120), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("site_id", "slug", name="uq_tag_slug_per_site"),
    )


class PageTagLink(db.Model):
    __tablename__ = "page_tag_link"

    page_id = db.Column(
        db.Integer, db.ForeignKey("page.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id = db.Column(
        db.Integer, db.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True
    )
    to_site_id = db.Column(db.Integer, db.ForeignKey("hostsite.id"), primary_key=True)
    from_site_id = db.Column(db.Integer, db.ForeignKey("hostsite.id"), nullable=False)
