class InvariantViolation(Exception):
    """Raised when a domain rule is broken before anything is written."""
