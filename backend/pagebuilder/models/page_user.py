from pagebuilder.extensions import db

page_user = db.Table(
    "page_user",
    db.Column("page_id", db.Integer, db.ForeignKey("page.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)
