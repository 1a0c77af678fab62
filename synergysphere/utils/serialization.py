from pydantic import BaseModel


def dump(schema: type[BaseModel], obj) -> dict:
    """ORM object -> JSON-safe dict shaped by ``schema`` (datetimes as ISO strings)."""
    return schema.model_validate(obj).model_dump(mode="json")
