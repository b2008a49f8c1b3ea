# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration models and validation for filehash.

Pydantic models validate raw option tables (TOML files, dictionaries built in
code, CLI flags) and are then converted into slotted dataclasses used at
runtime. Option names are accepted both in snake_case and in the camelCase
spelling used by asset-pipeline configs (``mappingKey``, ``mappingValue``), and
``output`` is accepted as an alias of ``mapping``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Literal, TypeAlias

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from filehash.core.model_types import FailurePolicy, HashMode
from filehash.core.types import FileGroup
from filehash.exceptions import FilehashValidationError
from filehash.template import TemplateRenderer

from .constants import (
    CONFIG_VERSION,
    DEFAULT_ALGORITHM,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ETAG,
    DEFAULT_HASHLEN,
    DEFAULT_MAPPING,
    DEFAULT_MAPPING_KEY,
    DEFAULT_MAPPING_VALUE,
    DEFAULT_RENAME,
    MAPPING_PATH_VARIABLES,
)
from .validation import ensure_list, normalise_algorithm, normalise_encoding, require_positive_int

if TYPE_CHECKING:
    from pathlib import Path

    from filehash.core.type_aliases import SourcePath

FAILURE_POLICY_VALUES: tuple[str, ...] = tuple(policy.value for policy in FailurePolicy)

Concurrency: TypeAlias = int | Literal["auto"] | None

_TEMPLATE_CHECKER = TemplateRenderer()


class ConfigValidationError(FilehashValidationError):
    """Raised when configuration data contains invalid values."""


class ConfigFieldChoiceError(ConfigValidationError):
    """Raised when a configuration field is provided with an unsupported value."""

    def __init__(self, field: str, allowed: tuple[str, ...]) -> None:
        """Initialize the exception with the field name and allowed values.

        Args:
            field: The name of the configuration field with an invalid value.
            allowed: Tuple of allowed values for this field.
        """
        self.field = field
        self.allowed = allowed
        allowed_text = ", ".join(sorted(allowed))
        super().__init__(f"{field} must be one of: {allowed_text}")


class UnsupportedConfigVersionError(ConfigValidationError):
    """Raised when a configuration file declares an unsupported schema version."""

    def __init__(self, provided: int, expected: int) -> None:
        self.provided = provided
        self.expected = expected
        super().__init__(f"Unsupported config_version {provided}; expected {expected}")


class ConfigReadError(ConfigValidationError):
    """Raised when a configuration file cannot be read from disk."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Unable to read {path}: {error}")


class InvalidConfigFileError(ConfigValidationError):
    """Raised when a configuration file fails validation."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Invalid filehash configuration in {path}: {error}")


class InvalidOptionsError(ConfigValidationError):
    """Raised when an in-memory options mapping fails validation."""

    def __init__(self, error: ValidationError) -> None:
        self.error = error
        super().__init__(f"Invalid filehash options: {error}")


def _template_or_false(value: object, *, default: str, context: str) -> str | Literal[False]:
    # True selects the default template; False, None and "" disable the option.
    if value is True:
        return default
    if value is False or value is None:
        return False
    if not isinstance(value, str):
        message = f"{context} must be a template string or a boolean"
        raise ValueError(message)
    if not value:
        return False
    _TEMPLATE_CHECKER.validate(value)
    return value


class OptionsModel(BaseModel):
    """Pydantic model for validating hashing options.

    Attributes:
        algorithm: hashlib algorithm used in content mode.
        hashlen: Number of hex characters kept from the digest (``None`` keeps all).
        encoding: Optional codec applied to file bytes before hashing.
        salt: Optional text appended to the hash input after the file bytes.
        etag: ``False`` for content hashing, ``True`` or a template for
            metadata-derived fingerprints.
        rename: Template for the copied file's path, or ``False``.
        keep: Whether the source file survives being copied.
        mapping: Template for the mapping file path, or ``False``.
        mapping_key: Template for each mapping key, or ``False`` for the source path.
        mapping_value: Template for each mapping value, or ``False`` for the source path.
        merge: Whether entries of an existing mapping file are preserved.
        concurrency: Bound on in-flight fingerprint operations.
        on_error: Policy for files that cannot be fingerprinted.
        chunk_size: Bytes read per chunk in content mode.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    algorithm: str = DEFAULT_ALGORITHM
    hashlen: int | None = DEFAULT_HASHLEN
    encoding: str | None = None
    salt: str | None = None
    etag: bool | str = False
    rename: bool | str = DEFAULT_RENAME
    keep: bool = True
    mapping: bool | str = Field(default=DEFAULT_MAPPING, validation_alias=AliasChoices("mapping", "output"))
    mapping_key: bool | str = Field(
        default=DEFAULT_MAPPING_KEY,
        validation_alias=AliasChoices("mapping_key", "mappingKey"),
    )
    mapping_value: bool | str = Field(
        default=DEFAULT_MAPPING_VALUE,
        validation_alias=AliasChoices("mapping_value", "mappingValue"),
    )
    merge: bool = False
    concurrency: Concurrency = None
    on_error: FailurePolicy = Field(default=FailurePolicy.SKIP, validation_alias=AliasChoices("on_error", "onError"))
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, validation_alias=AliasChoices("chunk_size", "chunkSize"))

    @field_validator("algorithm", mode="before")
    @classmethod
    def _validate_algorithm(cls, value: object) -> str:
        if not isinstance(value, str):
            message = "algorithm must be a string"
            raise ValueError(message)
        return normalise_algorithm(value)

    @field_validator("hashlen", "chunk_size", mode="before")
    @classmethod
    def _validate_positive(cls, value: object, info: ValidationInfo) -> int | None:
        if value is None and info.field_name == "hashlen":
            return None
        if isinstance(value, bool):
            message = f"{info.field_name} must be an integer"
            raise ValueError(message)
        return require_positive_int(value, context=info.field_name or "value")

    @field_validator("encoding", mode="before")
    @classmethod
    def _validate_encoding(cls, value: object) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            message = "encoding must be a string"
            raise ValueError(message)
        return normalise_encoding(value)

    @field_validator("salt", mode="before")
    @classmethod
    def _empty_salt(cls, value: object) -> object:
        return None if value == "" else value

    @field_validator("etag", mode="before")
    @classmethod
    def _validate_etag(cls, value: object) -> bool | str:
        if value is None:
            return False
        if isinstance(value, str) and value:
            _TEMPLATE_CHECKER.validate(value)
        return value if value != "" else False

    @field_validator("rename", mode="before")
    @classmethod
    def _validate_rename(cls, value: object) -> str | Literal[False]:
        return _template_or_false(value, default=DEFAULT_RENAME, context="rename")

    @field_validator("mapping", mode="before")
    @classmethod
    def _validate_mapping(cls, value: object) -> str | Literal[False]:
        template = _template_or_false(value, default=DEFAULT_MAPPING, context="mapping")
        if template:
            unknown = sorted(set(_TEMPLATE_CHECKER.names(template)) - set(MAPPING_PATH_VARIABLES))
            if unknown:
                message = f"mapping may only reference cwd and dest, not {', '.join(unknown)}"
                raise ValueError(message)
        return template

    @field_validator("mapping_key", mode="before")
    @classmethod
    def _validate_mapping_key(cls, value: object) -> str | Literal[False]:
        return _template_or_false(value, default=DEFAULT_MAPPING_KEY, context="mapping_key")

    @field_validator("mapping_value", mode="before")
    @classmethod
    def _validate_mapping_value(cls, value: object) -> str | Literal[False]:
        return _template_or_false(value, default=DEFAULT_MAPPING_VALUE, context="mapping_value")

    @field_validator("concurrency", mode="before")
    @classmethod
    def _validate_concurrency(cls, value: object) -> Concurrency:
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() == "auto":
            return "auto"
        return require_positive_int(value, context="concurrency")

    @field_validator("on_error", mode="before")
    @classmethod
    def _normalise_on_error(cls, value: object) -> FailurePolicy:
        if isinstance(value, FailurePolicy):
            return value
        if isinstance(value, str):
            try:
                return FailurePolicy.from_str(value)
            except ValueError as exc:
                msg = "on_error"
                raise ConfigFieldChoiceError(msg, FAILURE_POLICY_VALUES) from exc
        msg = "on_error"
        raise ConfigFieldChoiceError(msg, FAILURE_POLICY_VALUES)


class GroupModel(BaseModel):
    """Pydantic model for one ``[[groups]]`` entry.

    Attributes:
        cwd: Base directory the ``src`` patterns are relative to.
        dest: Destination directory for fingerprinted copies.
        src: Source paths or glob patterns; ``!pattern`` excludes matches.
        options: Options overriding the top-level ``[options]`` table.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    cwd: str | None = None
    dest: str | None = None
    src: list[str] = Field(default_factory=list, validation_alias=AliasChoices("src", "sources"))
    options: OptionsModel | None = None

    @field_validator("src", mode="before")
    @classmethod
    def _coerce_src(cls, value: object) -> list[str]:
        return ensure_list(value) or []

    @field_validator("cwd", "dest", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ConfigModel(BaseModel):
    """Pydantic model for the top-level filehash configuration.

    Attributes:
        config_version: Schema version number for the configuration file.
        options: Options shared by every group.
        groups: File groups to process, in order.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    config_version: int = Field(default=CONFIG_VERSION)
    options: OptionsModel = Field(default_factory=OptionsModel)
    groups: list[GroupModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_version(self) -> ConfigModel:
        if self.config_version != CONFIG_VERSION:
            raise UnsupportedConfigVersionError(self.config_version, CONFIG_VERSION)
        return self


@dataclass(slots=True, frozen=True)
class HashOptions:
    """Runtime hashing options.

    Template fields hold ``None`` when the corresponding derivation is
    disabled. ``concurrency`` is resolved lazily so ``FILEHASH_WORKERS`` is
    read when a group runs, not when options are built.
    """

    algorithm: str = DEFAULT_ALGORITHM
    hashlen: int | None = DEFAULT_HASHLEN
    encoding: str | None = None
    salt: str | None = None
    etag: str | None = None
    rename: str | None = DEFAULT_RENAME
    keep: bool = True
    mapping: str | None = DEFAULT_MAPPING
    mapping_key: str | None = DEFAULT_MAPPING_KEY
    mapping_value: str | None = DEFAULT_MAPPING_VALUE
    merge: bool = False
    concurrency: Concurrency = None
    on_error: FailurePolicy = FailurePolicy.SKIP
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def mode(self) -> HashMode:
        return HashMode.ETAG if self.etag is not None else HashMode.CONTENT


def _template_field(value: bool | str, *, default: str) -> str | None:
    if value is True:
        return default
    if value is False:
        return None
    return value


def options_from_model(model: OptionsModel) -> HashOptions:
    """Convert a validated ``OptionsModel`` into ``HashOptions``.

    Args:
        model: The validated options model.

    Returns:
        Runtime options with disabled templates mapped to ``None``.
    """
    return HashOptions(
        algorithm=model.algorithm,
        hashlen=model.hashlen,
        encoding=model.encoding,
        salt=model.salt,
        etag=_template_field(model.etag, default=DEFAULT_ETAG),
        rename=_template_field(model.rename, default=DEFAULT_RENAME),
        keep=model.keep,
        mapping=_template_field(model.mapping, default=DEFAULT_MAPPING),
        mapping_key=_template_field(model.mapping_key, default=DEFAULT_MAPPING_KEY),
        mapping_value=_template_field(model.mapping_value, default=DEFAULT_MAPPING_VALUE),
        merge=model.merge,
        concurrency=model.concurrency,
        on_error=model.on_error,
        chunk_size=model.chunk_size,
    )


def build_options(raw: Mapping[str, object] | None = None, **overrides: object) -> HashOptions:
    """Validate an options mapping and return runtime ``HashOptions``.

    Args:
        raw: Option table, using either snake_case or camelCase keys.
        **overrides: Additional options applied on top of `raw`.

    Returns:
        Validated runtime options.

    Raises:
        InvalidOptionsError: If any option fails validation.
    """
    payload: dict[str, object] = dict(raw or {})
    payload.update(overrides)
    try:
        model = OptionsModel.model_validate(payload)
    except ValidationError as exc:
        raise InvalidOptionsError(exc) from exc
    return options_from_model(model)


def merge_option_models(base: OptionsModel, override: OptionsModel | None) -> OptionsModel:
    """Overlay the explicitly set fields of `override` onto `base`."""
    if override is None:
        return base
    return base.model_copy(update=override.model_dump(exclude_unset=True))


def _default_groups() -> list[FileGroup]:
    return []


@dataclass(slots=True)
class Config:
    """Runtime configuration: shared options plus the groups to process.

    Attributes:
        options: Options applied to groups without their own overrides.
        groups: File groups with expanded source lists.
        root: Directory relative ``cwd``/``dest`` paths are resolved against.
    """

    options: HashOptions = field(default_factory=HashOptions)
    groups: list[FileGroup] = field(default_factory=_default_groups)
    root: Path | None = None


def group_from_model(
    model: GroupModel,
    base_options: OptionsModel,
    sources: list[SourcePath],
) -> FileGroup:
    """Convert a ``GroupModel`` into a ``FileGroup`` with its effective options.

    Args:
        model: The validated group model.
        base_options: Top-level options the group's overrides apply to.
        sources: Source list after glob expansion.

    Returns:
        The runtime file group.
    """
    options = options_from_model(merge_option_models(base_options, model.options)) if model.options else None
    return FileGroup(cwd=model.cwd, dest=model.dest, sources=sources, options=options)


__all__ = [
    "Config",
    "ConfigFieldChoiceError",
    "ConfigModel",
    "ConfigReadError",
    "ConfigValidationError",
    "GroupModel",
    "HashOptions",
    "InvalidConfigFileError",
    "InvalidOptionsError",
    "OptionsModel",
    "UnsupportedConfigVersionError",
    "build_options",
    "group_from_model",
    "merge_option_models",
    "options_from_model",
]
