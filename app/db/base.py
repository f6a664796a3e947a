import enum

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum members by value ("connected") rather than by name."""
    return [member.value for member in enum_cls]
