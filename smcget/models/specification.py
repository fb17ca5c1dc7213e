# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Specification

The manifest (`<name>.yml`) describing a package's content, authors and
dependencies. A specification is validated on construction and immutable
afterwards.
"""

import re
import yaml
from datetime import datetime, UTC
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from smcget.core.errors import InvalidSpecificationError
from .categories import CONTENT_CATEGORIES

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

SPEC_EXTENSION = ".yml"
ARCHIVE_EXTENSION = ".smcpak"

# The keys listed here must be mentioned inside a package spec, otherwise the
# package is considered broken. Checked in this order.
SPEC_MANDATORY_KEYS = ("title", "authors", "difficulty", "description")
# Additionally required for specs produced by the build process.
BUILD_MANDATORY_KEYS = ("last_update", "checksums")


class PackageSpecification(BaseModel):
    """Authoritative manifest for one package."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., description="Package name without file extension")
    title: str
    authors: List[str] = Field(..., min_length=1)
    difficulty: str
    description: str
    install_message: Optional[str] = None
    remove_message: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    levels: List[str] = Field(default_factory=list)
    music: List[str] = Field(default_factory=list)
    sounds: List[str] = Field(default_factory=list)
    graphics: List[str] = Field(default_factory=list)
    worlds: List[str] = Field(default_factory=list)
    last_update: Optional[datetime] = None
    checksums: Optional[Dict[str, Dict[str, Any]]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not NAME_PATTERN.match(v):
            raise ValueError(f"invalid package name '{v}'")
        return v

    @field_validator("authors", "dependencies", "levels", "music", "sounds", "graphics", "worlds", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        # An empty YAML key (`levels:`) parses to None
        return [] if v is None else v

    @field_validator("levels", "music", "sounds", "graphics", "worlds")
    @classmethod
    def validate_content_paths(cls, v):
        for filename in v:
            path = PurePosixPath(filename)
            if not path.parts or path.is_absolute() or "\\" in filename:
                raise ValueError(f"invalid content file name '{filename}'")
            if ".." in path.parts:
                raise ValueError(f"content file name '{filename}' leaves its category directory")
        return v

    @field_validator("dependencies")
    @classmethod
    def deduplicate_dependencies(cls, v):
        return list(dict.fromkeys(v))

    @field_validator("last_update")
    @classmethod
    def assume_utc(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @model_validator(mode="after")
    def check_self_dependency(self):
        if self.name in self.dependencies:
            raise ValueError(f"package {self.name} depends on itself")
        return self

    @property
    def spec_file_name(self) -> str:
        return f"{self.name}{SPEC_EXTENSION}"

    @property
    def archive_file_name(self) -> str:
        return f"{self.name}{ARCHIVE_EXTENSION}"

    @classmethod
    def from_document(
        cls,
        raw: Union[str, bytes, Dict[str, Any]],
        name: str,
        require_build_keys: bool = False
    ) -> "PackageSpecification":
        """
        Parse and validate a manifest document.

        Args:
            raw: YAML text or an already parsed mapping
            name: Package name (the manifest does not carry it)
            require_build_keys: Also require last_update and checksums

        Returns:
            Validated specification

        Raises:
            InvalidSpecificationError: On parse failure, missing mandatory
                                       keys (the first one in declared order
                                       is reported) or invalid values
        """
        if isinstance(raw, (str, bytes)):
            try:
                document = yaml.safe_load(raw)
            except yaml.YAMLError as e:
                raise InvalidSpecificationError(f"Invalid YAML: {e}")
        else:
            document = raw

        if not isinstance(document, dict):
            raise InvalidSpecificationError(
                f"Specification for {name} is not a mapping"
            )

        mandatory = SPEC_MANDATORY_KEYS + (BUILD_MANDATORY_KEYS if require_build_keys else ())
        for key in mandatory:
            if key not in document:
                raise InvalidSpecificationError(f"Mandatory key {key} is missing!", key=key)

        data = {k: v for k, v in document.items() if k != "name"}
        try:
            return cls(name=name, **data)
        except ValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first["loc"]) or None
            raise InvalidSpecificationError(
                f"Invalid specification for {name}: {key}: {first['msg']}" if key
                else f"Invalid specification for {name}: {first['msg']}",
                key=key
            )

    @classmethod
    def from_file(cls, path: Union[str, Path], require_build_keys: bool = False) -> "PackageSpecification":
        """Load a manifest; the package name is the file name without `.yml`."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise InvalidSpecificationError(f"File '{path}' doesn't exist!")
        except UnicodeDecodeError as e:
            raise InvalidSpecificationError(f"Specification '{path}' is not valid UTF-8: {e.reason}")
        name = path.name[:-len(SPEC_EXTENSION)] if path.name.endswith(SPEC_EXTENSION) else path.name
        return cls.from_document(text, name, require_build_keys=require_build_keys)

    def to_document(self) -> Dict[str, Any]:
        """Manifest mapping as stored on disk (without the name)."""
        return self.model_dump(exclude={"name"}, exclude_none=True)

    def save(self, directory: Union[str, Path]) -> Path:
        """
        Write the manifest to `directory/<name>.yml`.

        The document is validated again before anything is written.

        Raises:
            InvalidSpecificationError: If the specification does not validate
        """
        document = self.to_document()
        type(self).from_document(document, self.name)

        path = Path(directory) / self.spec_file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        return path

    def files(self, category: str) -> List[str]:
        """Declared files of a content category."""
        if category not in CONTENT_CATEGORIES:
            raise KeyError(f"No such content category: {category}")
        return getattr(self, category)

    def checksum_for(self, category: str, filename: str) -> Optional[Any]:
        """
        Recorded checksum of a content file.

        Worlds are directories, their checksum entry is a mapping of file
        name to checksum. Returns None if nothing was recorded.
        """
        if not self.checksums:
            return None
        return (self.checksums.get(category) or {}).get(filename)


# Search field registry: field name -> extractor of the searchable strings.
SEARCH_FIELDS: Dict[str, Callable[[PackageSpecification], List[str]]] = {
    "name": lambda spec: [spec.name],
    "title": lambda spec: [spec.title],
    "authors": lambda spec: list(spec.authors),
    "difficulty": lambda spec: [spec.difficulty],
    "description": lambda spec: [spec.description],
    "levels": lambda spec: list(spec.levels),
    "music": lambda spec: list(spec.music),
    "sounds": lambda spec: list(spec.sounds),
    "graphics": lambda spec: list(spec.graphics),
    "worlds": lambda spec: list(spec.worlds),
}
