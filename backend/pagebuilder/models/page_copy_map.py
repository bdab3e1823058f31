from pagebuilder.extensions import db
from .base import BaseModel

class PageCopyMap(BaseModel):
    __tablename__ = "page_copy_map"

    from_page_id = db.Column(db.Integer, nullable=False, index=True)
    to_page_id = db.Column(db.Integer, nullable=False, index=True)
    from_site_id = db.Column(db.Integer, nullable=False)
    to_site_id = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint(
            "from_page_id", "from_site_id", "to_site_id",
            name="uq_page_copy_per_site_pair",
        ),
    )
