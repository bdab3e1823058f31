from .exceptions import InvariantViolation


def assert_page_identity(*, title, site_id, page_type) -> None:
    """Every page write needs a title, an owning site and a type."""
    if not title or not str(title).strip():
        raise InvariantViolation("Page title is required.")

    if not site_id:
        raise InvariantViolation("Page site id is required.")

    if page_type is None:
        raise InvariantViolation("Page type is required.")


def assert_activation_window(start, end) -> None:
    if start is not None and end is not None and end < start:
        raise InvariantViolation(
            f"Activation window ends before it starts: {start} > {end}"
        )
