from careops.exceptions import ValidationError


def require_ids(**ids):
    """Reject a request before any store access when an identifier is missing."""
    missing = [name for name, value in ids.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"{' and '.join(missing)} required")
