"""Domain services. Each function takes the store as its first argument."""
from activity_tracker.errors import ValidationError


def text(value, label):
    """Stripped string input; ``None`` reads as ''. Any other type is rejected."""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f'{label} must be text')
    return value.strip()
