"""Configuration for the command toolchain."""

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field, field_validator

PLACEHOLDERS = ("source", "artifact", "name", "workspace")


class CommandToolchainConfig(BaseModel):
    """Configuration for the command toolchain.

    Both argv templates accept the ``{source}``, ``{artifact}``, ``{name}``
    and ``{workspace}`` placeholders. Without a build command the source
    itself is the artifact.
    """

    build: Sequence[str] | None = None
    run: Sequence[str] = ("{artifact}",)
    artifact_suffix: str = ""
    env: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("build", "run")
    @classmethod
    def _check_placeholders(cls, template: Sequence[str] | None) -> Sequence[str] | None:
        if template is None:
            return template
        if not template:
            raise ValueError("Command template must not be empty")

        values = dict.fromkeys(PLACEHOLDERS, "")
        for arg in template:
            try:
                arg.format_map(values)
            except (KeyError, IndexError, ValueError) as e:
                raise ValueError(
                    f"Invalid placeholder in {arg!r} ({e}); "
                    f"available: {', '.join(PLACEHOLDERS)}"
                ) from e
        return template
