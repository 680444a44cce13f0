from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from editor_bridge.domain.entities import Format, Theme


class CustomExtension(BaseModel):
    """An engine extension to re-register with a restricted whitelist."""

    import_path: str = Field(alias="import")
    whitelist: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AdapterSettings(BaseModel):
    """Process-level settings shared by every adapter instance."""

    modules: dict[str, Any] = Field(default_factory=dict)
    language: str = ""
    debug: bool | str | None = False
    customs: list[CustomExtension] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class EditorConfiguration(BaseModel):
    """
    Per-instance editor options.

    Fixed for the adapter's lifetime. `read_only` and `placeholder` only
    seed the adapter's live values; later changes go through
    `EditorAdapter.apply_changes`.
    """

    format: Format = Format.HTML
    sanitize: bool = False
    style: dict[str, str] = Field(default_factory=dict)

    max_length: int | None = Field(default=None, alias="maxLength")
    min_length: int | None = Field(default=None, alias="minLength")
    required: bool = False

    bounds: Any = None
    formats: list[str] | None = None
    modules: dict[str, Any] | None = None
    placeholder: str | None = None
    read_only: bool = Field(default=False, alias="readOnly")
    scrolling_container: Any = Field(default=None, alias="scrollingContainer")
    strict: bool = True
    theme: Theme | None = None

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )
