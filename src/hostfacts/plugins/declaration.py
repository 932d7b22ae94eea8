"""
Plugin declaration schema and validation.

Defines the metadata a plugin file passes to ``hostfacts.plugin(...)``.
Declarations are validated using Pydantic before any plugin type is created
or reopened, so a malformed declaration never leaves a half-built type behind.
"""

import logging
from typing import List

from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator

from hostfacts.attributes import normalize_attribute
from hostfacts.exceptions import (
    AttributeSyntaxError,
    IllegalPluginDefinition,
    InvalidPluginName,
)

logger = logging.getLogger(__name__)

# The only schema version this loader instantiates
CURRENT_SCHEMA_VERSION = 2

# Schema versions that are recognized but no longer supported
LEGACY_SCHEMA_VERSIONS = (1,)

KNOWN_SCHEMA_VERSIONS = (*LEGACY_SCHEMA_VERSIONS, CURRENT_SCHEMA_VERSION)


class PluginDeclaration(BaseModel):
    """
    Metadata declared by a plugin file.

    Example:
        >>> PluginDeclaration(name="Kernel", provides=["kernel", "kernel/release"])
    """

    name: str = Field(
        ...,
        description="Plugin name (CamelCase, starting with a capital letter)",
        pattern=r"^[A-Z][A-Za-z0-9_]*$",
    )

    schema_version: StrictInt = Field(
        CURRENT_SCHEMA_VERSION,
        description="Plugin schema version the declaration is written against",
    )

    provides: List[str] = Field(
        default_factory=list,
        description="Attribute paths the plugin produces (e.g. ['kernel/release'])",
    )

    depends: List[str] = Field(
        default_factory=list,
        description="Attribute paths the plugin needs from other plugins",
    )

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, value: int) -> int:
        """Reject schema versions this loader has never heard of."""
        if value not in KNOWN_SCHEMA_VERSIONS:
            raise ValueError(
                f"unknown plugin schema version {value} "
                f"(known versions: {', '.join(map(str, KNOWN_SCHEMA_VERSIONS))})"
            )
        return value

    @field_validator("provides", "depends")
    @classmethod
    def validate_attributes(cls, attributes: List[str]) -> List[str]:
        """Ensure attribute paths are well formed and drop duplicates."""
        unique: List[str] = []
        for attribute in attributes:
            try:
                normalize_attribute(attribute)
            except AttributeSyntaxError as e:
                raise ValueError(str(e)) from e
            if attribute not in unique:
                unique.append(attribute)
        return unique

    @property
    def is_current(self) -> bool:
        """Check if the declaration targets the supported schema version."""
        return self.schema_version == CURRENT_SCHEMA_VERSION

    @classmethod
    def from_arguments(
        cls,
        name: object,
        schema_version: object,
        provides: object,
        depends: object,
    ) -> "PluginDeclaration":
        """
        Build a declaration from raw decorator arguments.

        Raises:
            InvalidPluginName: If the name fails validation
            IllegalPluginDefinition: If any other field fails validation
        """
        try:
            return cls(
                name=name,
                schema_version=schema_version,
                provides=provides,
                depends=depends,
            )
        except ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()
            )
            if any(err["loc"] and err["loc"][0] == "name" for err in e.errors()):
                raise InvalidPluginName(
                    f"Plugin name must be a CamelCase string starting with a "
                    f"capital letter (got {name!r})"
                ) from e
            raise IllegalPluginDefinition(f"Invalid plugin declaration: {messages}") from e
