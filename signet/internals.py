"""
Internal metaclass shared by every descriptor-like object of signet.

SpecType turns a plain class into an introspectable, read-only descriptor:
- __typename__ is derived from the class name ("OptionSpec" -> "option-spec")
  and used in every validation message, so errors read the same everywhere.
- each name listed in __introspectable__ becomes a read-only property over the
  backing "_{name}" attribute (containers handed out as immutable views),
  unless the class body defines that name itself.
- __repr__ and __rich_repr__ list the __displayable__ names (falling back to
  __introspectable__) for logs and rich pretty printing.
- sealed=True forbids subclassing of the resulting class.
"""
import functools
import operator
import re

from .utils import Unset, coalesce, rename, view


class SpecType(type):
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: view(field) for field in namespace.get("__introspectable__", ()) if field not in namespace
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield field, getattr(self, field)
            self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


__all__ = ("SpecType",)
