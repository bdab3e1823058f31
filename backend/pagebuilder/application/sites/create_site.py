from typing import Optional
from flask import current_app
from pagebuilder.extensions import db
from pagebuilder.models.site import Site
from pagebuilder.repositories.page import PageRepository
from pagebuilder.utils.transaction import transactional


def create_site(
    *,
    name: str,
    organization_id: Optional[int] = None,
    data_directory: Optional[str] = None,
) -> Site:
    """Create a hostsite together with its default homepage."""
    if not name or not name.strip():
        raise ValueError("Site name is required")

    site = Site()
    site.name = name.strip()
    site.organization_id = organization_id
    site.data_directory = data_directory
    site.is_active = True

    with transactional():
        db.session.add(site)
        db.session.flush()  # ensures site.id is available

        homepage_id = PageRepository().add_default_homepage(site.id)

    current_app.logger.info(f"Created site {site.id} with homepage {homepage_id}")
    return site
