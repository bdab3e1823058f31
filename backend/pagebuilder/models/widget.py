from pagebuilder.extensions import db
from .base import BaseModel
from .site_mixin import SiteMixin

class Widget(BaseModel, SiteMixin):
    __tablename__ = "widget"

    page_id = db.Column(db.Integer, db.ForeignKey("page.id"), nullable=False, index=True)
    type = db.Column(db.String(100), nullable=False)  # text, gallery, contact, menu
    title = db.Column(db.String(255), nullable=False, default="")
    order = db.Column(db.Integer, default=0)
    settings = db.Column(db.JSON, default=dict)

    page = db.relationship("Page", back_populates="widgets")


class WidgetLink(db.Model):
    __tablename__ = "widget_link"

    widget_id = db.Column(
        db.Integer, db.ForeignKey("widget.id", ondelete="CASCADE"), primary_key=True
    )
    to_site_id = db.Column(db.Integer, db.ForeignKey("hostsite.id"), primary_key=True)
    from_site_id = db.Column(db.Integer, db.ForeignKey("hostsite.id"), nullable=False)
