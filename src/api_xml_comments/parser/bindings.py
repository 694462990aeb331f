"""Host metadata describing which code backs each API operation.

A bindings file maps operations (by operationId or ``"GET /path"``) to
the method that implements them, its declared parameters, and any
parameters bound to model properties::

    operations:
      getPet:
        method:
          type: PetStore.Controllers.PetsController
          name: GetById
          parameters: [System.Int32]
        parameters:
          - name: id
            binder_model_name: petId
        parameter_descriptions:
          - name: name
            container_type: PetStore.Models.PetFilter
            property_name: Name
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from api_xml_comments.comments.ids import MethodIdentity, PropertyIdentity, TypeRef, parse_type_name
from api_xml_comments.parser.base import ApiOperation


class BindingsError(Exception):
    """Raised when a bindings file cannot be read or is invalid."""


class ActionParameter(BaseModel):
    """A parameter declared on the backing method."""

    name: str
    binder_model_name: str | None = None  # explicit bound name, e.g. [FromQuery(Name = "q")]

    @property
    def bound_name(self) -> str:
        return self.binder_model_name or self.name


class ParameterDescription(BaseModel):
    """An API parameter as described by the host, possibly bound to a model property."""

    name: str
    container_type: TypeRef | None = None
    property_name: str | None = None

    @field_validator("container_type", mode="before")
    @classmethod
    def _parse_container_type(cls, value):
        return parse_type_name(value) if isinstance(value, str) else value

    @property
    def is_property_bound(self) -> bool:
        return self.container_type is not None and self.property_name is not None

    def property_identity(self) -> PropertyIdentity:
        return PropertyIdentity(declaring_type=self.container_type, name=self.property_name)


class ApiDescription(BaseModel):
    """Everything the host knows about the code behind one operation."""

    method: MethodIdentity | None = None  # None for endpoints not backed by a method
    parameters: list[ActionParameter] = []
    parameter_descriptions: list[ParameterDescription] = []


class OperationFilterContext(BaseModel):
    """What an operation filter receives alongside the operation."""

    api_description: ApiDescription


class Bindings(BaseModel):
    operations: dict[str, ApiDescription] = {}

    def find(self, operation: ApiOperation) -> ApiDescription | None:
        """Look up an operation by operationId, then by ``"METHOD /path"``."""
        if operation.operation_id and operation.operation_id in self.operations:
            return self.operations[operation.operation_id]
        return self.operations.get(operation.key)


def load_bindings(file_path: Path) -> Bindings:
    """Load a bindings file (YAML or JSON).

    Raises:
        BindingsError: if the file is unreadable or does not validate.
    """
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise BindingsError(f"Cannot load bindings file {file_path}: {e}") from e

    try:
        return Bindings.model_validate(data)
    except ValidationError as e:
        raise BindingsError(f"Invalid bindings file {file_path}: {e}") from e
