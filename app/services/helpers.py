from pydantic import BaseModel

from app.core.exceptions import ValidationException


def apply_updates(entity, data: BaseModel, required: tuple[str, ...] = ()) -> dict:
    """
    Copy the fields present in a partial-update payload onto an entity.

    Optional columns may be cleared with an explicit null; columns named in
    `required` may not.

    Returns:
        The applied changes
    """
    changes = data.model_dump(exclude_unset=True)
    cleared = {field: "This field cannot be empty" for field in required if field in changes and changes[field] is None}
    if cleared:
        raise ValidationException("Invalid fields", fields=cleared)

    for field, value in changes.items():
        setattr(entity, field, value)
    return changes


def money(value: float) -> float:
    return round(float(value), 2)
