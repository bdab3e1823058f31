from pagebuilder.extensions import db
from pagebuilder.domain.page_types import PageTypeKind

class PageType(db.Model):
    __tablename__ = "page_type"

    # Ids are the PageTypeKind values
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.String(255), nullable=False, default="")

    @property
    def kind(self) -> PageTypeKind:
        return PageTypeKind(self.id)


def seed_page_types(session=None) -> int:
    """
    Insert the missing page_type rows, one per PageTypeKind.
    Returns the number of rows created.
    """
    session = session or db.session
    existing = {row.id for row in session.query(PageType).all()}
    created = 0

    for kind in PageTypeKind:
        if kind.value in existing:
            continue
        page_type = PageType()
        page_type.id = kind.value
        page_type.name = kind.label
        page_type.description = kind.label
        session.add(page_type)
        created += 1

    session.flush()
    return created
