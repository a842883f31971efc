import enum
from typing import Optional, Type

from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator


class CaseInsensitiveEnum(TypeDecorator):
    """VARCHAR column holding the lowercase value of a ``str`` enum.

    Writes accept the enum member or its value in any case; reads always
    return the enum member.
    """

    impl = SAEnum
    cache_ok = True

    def __init__(self, enum_cls: Type[enum.Enum], **kwargs):
        self.enum_cls = enum_cls
        kwargs.setdefault("native_enum", False)
        kwargs.setdefault("length", 32)
        kwargs.setdefault("name", enum_cls.__name__.lower())
        super().__init__(*[member.value for member in enum_cls], **kwargs)

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, self.enum_cls):
            return value.value
        return self.enum_cls(str(value).lower()).value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_cls(value.lower())
