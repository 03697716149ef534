"""Pydantic models for standard definitions.

A standard definition layers everything the canonical schema cannot say on
its own on top of it: wizard steps, the station type discriminator, advisory
fields, date range checks and the helper fields the surrounding application
adds to documents.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BaseDefinitionModel(BaseModel):
    """Base model with common configuration for all definition models."""

    model_config = ConfigDict(
        extra="forbid",  # Don't allow extra fields
        frozen=True,
        str_strip_whitespace=True,
    )


class StepDefinition(BaseDefinitionModel):
    """One step of data entry and the schema paths it owns."""

    name: str = Field(min_length=1, description="Step identifier")
    title: str | None = Field(default=None, description="Display title")
    description: str | None = None
    fields: tuple[str, ...] = Field(
        default=(), description="Ordered canonical schema paths shown in this step"
    )
    summary: bool = Field(
        default=False,
        description="Summary steps report every issue of the document",
    )

    @field_validator("fields")
    @classmethod
    def validate_unique_fields(cls, v):
        """Each path may only appear once per step."""
        duplicates = sorted({path for path in v if v.count(path) > 1})
        if duplicates:
            raise ValueError(f"Duplicate step fields: {', '.join(duplicates)}")
        return v


class DiscriminatorGroup(BaseDefinitionModel):
    """A group of fields selected by a set of discriminator values."""

    name: str = Field(min_length=1)
    fields: tuple[str, ...] = Field(
        min_length=1, description="Property names relative to the discriminator's object"
    )
    values: tuple[str, ...] = Field(min_length=1)
    conflict_message: str | None = Field(
        default=None,
        description="Message used when the group is populated but not selected; "
        "'{value}' is replaced with the discriminator value",
    )
    suggested_fix: str | None = None


class DiscriminatorDefinition(BaseDefinitionModel):
    """An enumerated field that selects mutually exclusive field groups."""

    field: str = Field(min_length=1, description="Canonical schema path of the discriminator")
    groups: tuple[DiscriminatorGroup, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_group_names(self):
        """Group names must be unique."""
        names = [group.name for group in self.groups]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate group names for discriminator '{self.field}'")
        return self


class RecommendationDefinition(BaseDefinitionModel):
    """An optional field that should be filled in."""

    path: str = Field(min_length=1)
    message: str = Field(min_length=1)
    suggested_fix: str | None = None


class DateRangeDefinition(BaseDefinitionModel):
    """Sibling properties whose values must be in chronological order."""

    start: str = "date_from"
    end: str = "date_to"
    message: str = "End date must be after start date"


class StandardDefinition(BaseDefinitionModel):
    """Root of a standard definition document."""

    name: str = Field(min_length=1)
    description: str | None = None
    helper_fields: tuple[str, ...] = ()
    steps: tuple[StepDefinition, ...] = Field(min_length=1)
    discriminators: tuple[DiscriminatorDefinition, ...] = ()
    recommended: tuple[RecommendationDefinition, ...] = ()
    date_ranges: tuple[DateRangeDefinition, ...] = ()

    @field_validator("steps")
    @classmethod
    def validate_unique_steps(cls, v):
        """Step names must be unique."""
        names = [step.name for step in v]
        if len(names) != len(set(names)):
            raise ValueError("Step names must be unique")
        return v

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def get_step(self, name: str) -> StepDefinition | None:
        """Get step definition by name."""
        for step in self.steps:
            if step.name == name:
                return step
        return None
