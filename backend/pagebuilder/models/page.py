from pagebuilder.extensions import db
from .base import BaseModel
from .site_mixin import SiteMixin

class Page(BaseModel, SiteMixin):
    __tablename__ = 'page'

    page_type_id = db.Column(
        db.Integer, db.ForeignKey("page_type.id"), nullable=False, index=True
    )
    title = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")
    slug = db.Column(db.String(255), nullable=False, index=True)
    keywords = db.Column(db.Text, nullable=False, default="")

    redirect_type = db.Column(db.String(50), nullable=True)
    redirect_weighted_odds = db.Column(db.Boolean, nullable=False, default=False)

    is_searchable = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_shareable = db.Column(db.Boolean, nullable=False, default=False)

    # Optional activation window, either bound may be open
    activation_start = db.Column(db.DateTime, nullable=True)
    activation_end = db.Column(db.DateTime, nullable=True)

    background_color = db.Column(db.String(32), nullable=False, default="")
    view_count = db.Column(db.Integer, nullable=False, default=0)
    update_count = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True)

    page_type = db.relationship("PageType", lazy="joined")
    site = db.relationship("Site")

    widgets = db.relationship(
        "Widget",
        back_populates="page",
        order_by="Widget.order",
        cascade="all, delete-orphan"
    )
    tags = db.relationship("Tag", secondary="page_tag", lazy="selectin")
    users = db.relationship("User", secondary="page_user")
    links = db.relationship("PageLink", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.name if self.name else self.title

    @property
    def kind(self):
        return self.page_type.kind

    def __repr__(self):
        return f"<Page {self.id} {self.slug!r} site={self.site_id}>"
