"""Pydantic option models for schema-modeler runs."""

from enum import Enum
from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class MigrationCategory(str, Enum):
    """Schema-object categories, in emission order."""
    FUNCTIONS = "functions"
    COMPOSITES = "composites"
    DOMAINS = "domains"
    TABLES = "tables"
    INDEXES = "indexes"
    FOREIGN_KEYS = "foreign_keys"
    VIEWS = "views"
    TRIGGERS = "triggers"
    SEEDERS = "seeders"


# Fixed emission order; never reordered by configuration.
CATEGORY_ORDER: List[MigrationCategory] = list(MigrationCategory)


class MigrationOptions(BaseModel):
    """Which migration categories are emitted."""
    model_config = ConfigDict(frozen=True)

    functions: bool = True
    composites: bool = True
    domains: bool = True
    tables: bool = True
    indexes: bool = True
    foreign_keys: bool = True
    views: bool = True
    triggers: bool = True
    seeders: bool = True

    def is_enabled(self, category: MigrationCategory) -> bool:
        return bool(getattr(self, category.value))


class ModelOptions(BaseModel):
    """Options affecting the host-language model fragments."""
    model_config = ConfigDict(frozen=True)

    add_null_type_for_nullable: bool = True
    replace_enums_with_types: bool = False


class GeneratorOptions(BaseModel):
    """Top-level options for one introspection run."""
    model_config = ConfigDict(frozen=True)

    schemas: List[str] = Field(default_factory=list)
    tables: List[str] = Field(default_factory=list)
    model: ModelOptions = Field(default_factory=ModelOptions)
    migrations: Union[MigrationOptions, Literal[False]] = Field(default_factory=MigrationOptions)
    junction_max_columns: int = 4

    def passes_filter(self, schema: str, table: str) -> bool:
        """Check a schema/table pair against the allow-lists."""
        if self.schemas and schema not in self.schemas:
            return False
        if self.tables and table not in self.tables:
            return False
        return True

    def migration_options(self) -> MigrationOptions:
        """Resolved migration options; ``False`` disables every category."""
        if self.migrations is False:
            return MigrationOptions(**{c.value: False for c in MigrationCategory})
        return self.migrations
