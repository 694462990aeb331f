"""Documentation-comment identifiers for methods and properties.

XML comment files index every member by a canonical string such as
``M:PetStore.Controllers.PetsController.GetById(System.Int32)`` or
``P:PetStore.Models.PetFilter.Name``. This module builds those strings
from structural type descriptions supplied by the host, and parses the
host-side type notation used in bindings files.
"""

import re

from pydantic import AliasChoices, BaseModel, Field, field_validator


class TypeRef(BaseModel):
    """Structural description of a type as seen in a member signature."""

    name: str
    namespace: str | None = None
    declaring_type: "TypeRef | None" = None  # enclosing type of a nested type
    generic_arity: int = 0  # open generic definitions, e.g. Repository`1
    generic_args: list["TypeRef"] = []
    generic_position: int | None = None  # set for generic parameters (`0, ``0)
    method_generic: bool = False
    array_ranks: list[int] = []  # [1] -> [], [2] -> [0:,0:]
    by_ref: bool = False

    @field_validator("declaring_type", mode="before")
    @classmethod
    def _parse_declaring_type(cls, value):
        return parse_type_name(value) if isinstance(value, str) else value

    @field_validator("generic_args", mode="before")
    @classmethod
    def _parse_generic_args(cls, value):
        if isinstance(value, list):
            return [parse_type_name(v) if isinstance(v, str) else v for v in value]
        return value


class MethodIdentity(BaseModel):
    """The declaring type, name and signature of a method."""

    declaring_type: TypeRef = Field(validation_alias=AliasChoices("declaring_type", "type"))
    name: str
    generic_arity: int = 0
    parameter_types: list[TypeRef] = Field(
        default=[], validation_alias=AliasChoices("parameter_types", "parameters")
    )

    @field_validator("declaring_type", mode="before")
    @classmethod
    def _parse_declaring_type(cls, value):
        return parse_type_name(value) if isinstance(value, str) else value

    @field_validator("parameter_types", mode="before")
    @classmethod
    def _parse_parameter_types(cls, value):
        if isinstance(value, list):
            return [parse_type_name(v) if isinstance(v, str) else v for v in value]
        return value


class PropertyIdentity(BaseModel):
    """The declaring type and name of a property."""

    declaring_type: TypeRef
    name: str

    @field_validator("declaring_type", mode="before")
    @classmethod
    def _parse_declaring_type(cls, value):
        return parse_type_name(value) if isinstance(value, str) else value


def comment_id_for_method(method: MethodIdentity) -> str:
    """Return the ``M:`` identifier for a method.

    Parameter types are fully expanded; a method without parameters has
    no parentheses at all.
    """
    name = method.name.replace(".", "#")  # .ctor -> #ctor
    if method.generic_arity:
        name += f"``{method.generic_arity}"

    comment_id = f"M:{_full_type_name(method.declaring_type)}.{name}"
    if method.parameter_types:
        params = ",".join(_full_type_name(p, expand_generic_args=True) for p in method.parameter_types)
        comment_id += f"({params})"
    return comment_id


def comment_id_for_property(prop: PropertyIdentity) -> str:
    """Return the ``P:`` identifier for a property."""
    return f"P:{_full_type_name(prop.declaring_type)}.{prop.name}"


def _full_type_name(type_ref: TypeRef, expand_generic_args: bool = False) -> str:
    if type_ref.generic_position is not None:
        ticks = "``" if type_ref.method_generic else "`"
        return f"{ticks}{type_ref.generic_position}{_suffixes(type_ref)}"

    name = _type_name(type_ref, expand_generic_args)
    namespace = _outermost(type_ref).namespace
    if namespace:
        name = f"{namespace}.{name}"
    return name + _suffixes(type_ref)


def _type_name(type_ref: TypeRef, expand_generic_args: bool) -> str:
    name = type_ref.name
    if type_ref.declaring_type is not None:
        name = f"{_type_name(type_ref.declaring_type, False)}.{name}"

    if expand_generic_args and type_ref.generic_args:
        args = ",".join(_full_type_name(a, expand_generic_args=True) for a in type_ref.generic_args)
        name += "{" + args + "}"
    else:
        arity = type_ref.generic_arity or len(type_ref.generic_args)
        if arity:
            name += f"`{arity}"
    return name


def _outermost(type_ref: TypeRef) -> TypeRef:
    while type_ref.declaring_type is not None:
        type_ref = type_ref.declaring_type
    return type_ref


def _suffixes(type_ref: TypeRef) -> str:
    parts = []
    for rank in type_ref.array_ranks:
        parts.append("[]" if rank == 1 else "[" + ",".join(["0:"] * rank) + "]")
    if type_ref.by_ref:
        parts.append("@")
    return "".join(parts)


_GENERIC_PARAM = re.compile(r"(``?)(\d+)")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:`(\d+))?")
_CLOSING = {"{": "}", "<": ">"}


def parse_type_name(text: str) -> TypeRef:
    """Parse a host-side type name into a TypeRef.

    Accepts ``Ns.Outer+Inner`` for nested types, ``Ns.List{System.String}``
    or ``Ns.List<System.String>`` for constructed generics, ```0`` and
    ````0`` for generic parameters, ``[]``/``[,]`` array suffixes and a
    trailing ``&`` or ``@`` for by-reference parameters.

    Raises:
        ValueError: if the name is malformed.
    """
    return _TypeNameParser(text).parse()


class _TypeNameParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> TypeRef:
        type_ref = self._parse_type()
        self._skip_spaces()
        if self.pos != len(self.text):
            raise self._error("unexpected trailing characters")
        return type_ref

    def _parse_type(self) -> TypeRef:
        self._skip_spaces()
        match = _GENERIC_PARAM.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            type_ref = TypeRef(
                name=match.group(0),
                generic_position=int(match.group(2)),
                method_generic=len(match.group(1)) == 2,
            )
        else:
            type_ref = self._parse_named()

        ranks, by_ref = self._parse_suffixes()
        return type_ref.model_copy(update={"array_ranks": ranks, "by_ref": by_ref})

    def _parse_named(self) -> TypeRef:
        # Groups are separated by '+', segments within a group by '.'
        groups: list[list[tuple[str, int]]] = [[]]
        while True:
            match = _IDENTIFIER.match(self.text, self.pos)
            if not match:
                raise self._error("expected a type name")
            self.pos = match.end()
            name = match.group(0).split("`")[0]
            groups[-1].append((name, int(match.group(1) or 0)))

            sep = self._peek()
            if sep == ".":
                self.pos += 1
            elif sep == "+":
                self.pos += 1
                groups.append([])
            else:
                break

        outer = groups[0]
        type_ref = TypeRef(
            name=outer[-1][0],
            generic_arity=outer[-1][1],
            namespace=".".join(n for n, _ in outer[:-1]) or None,
        )
        for group in groups[1:]:
            type_ref = TypeRef(
                name=".".join(n for n, _ in group),
                generic_arity=group[-1][1],
                declaring_type=type_ref,
            )

        if self._peek() in _CLOSING:
            args = self._parse_generic_args()
            type_ref = type_ref.model_copy(update={"generic_args": args, "generic_arity": 0})
        return type_ref

    def _parse_generic_args(self) -> list[TypeRef]:
        closing = _CLOSING[self.text[self.pos]]
        self.pos += 1
        args = [self._parse_type()]
        while True:
            self._skip_spaces()
            char = self._peek()
            if char == ",":
                self.pos += 1
                args.append(self._parse_type())
            elif char == closing:
                self.pos += 1
                return args
            else:
                raise self._error(f"expected ',' or '{closing}'")

    def _parse_suffixes(self) -> tuple[list[int], bool]:
        ranks: list[int] = []
        by_ref = False
        while True:
            char = self._peek()
            if char == "[" and not by_ref:
                end = self.text.find("]", self.pos)
                if end == -1:
                    raise self._error("unterminated array suffix")
                body = self.text[self.pos + 1:end]
                if body.replace(",", "").replace("0:", "").strip():
                    raise self._error("invalid array suffix")
                ranks.append(body.count(",") + 1)
                self.pos = end + 1
            elif char in ("&", "@") and not by_ref:
                by_ref = True
                self.pos += 1
            else:
                return ranks, by_ref

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_spaces(self) -> None:
        while self._peek() == " ":
            self.pos += 1

    def _error(self, message: str) -> ValueError:
        return ValueError(f"Invalid type name {self.text!r} at position {self.pos}: {message}")
