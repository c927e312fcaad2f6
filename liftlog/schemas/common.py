from pydantic import ValidationInfo


def not_null(value, info: ValidationInfo):
    """Reject an explicit null for a partial-update field whose column is required."""
    if value is None:
        raise ValueError(f"{info.field_name} may not be null")
    return value
