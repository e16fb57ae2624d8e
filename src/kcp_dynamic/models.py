"""Resource identifiers and Pydantic v2 models for per-call request options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class GroupVersionResource:
    """Identifies a resource type. An empty group is the core API group."""

    group: str
    version: str
    resource: str

    @property
    def group_version(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    @classmethod
    def from_api_version(cls, api_version: str, resource: str) -> GroupVersionResource:
        """Build a GVR from an ``apiVersion`` string such as ``apps/v1`` or ``v1``."""
        group, sep, version = api_version.rpartition("/")
        if not sep:
            return cls(group="", version=api_version, resource=resource)
        return cls(group=group, version=version, resource=resource)

    def __str__(self) -> str:
        if not self.group:
            return f"{self.version}/{self.resource}"
        return f"{self.group}/{self.version}/{self.resource}"


class PatchType(StrEnum):
    """Well-known patch content types. Any other token may be passed as a plain string."""

    JSON = "application/json-patch+json"
    MERGE = "application/merge-patch+json"
    STRATEGIC_MERGE = "application/strategic-merge-patch+json"
    APPLY = "application/apply-patch+yaml"


DeletionPropagation = Literal["Orphan", "Background", "Foreground"]
FieldValidation = Literal["Ignore", "Warn", "Strict"]


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _QueryOptions(BaseModel):
    """Options serialised into URL query parameters, in field declaration order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_query(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        for key, value in self.model_dump(by_alias=True, exclude_none=True).items():
            if isinstance(value, list):
                params.extend((key, _query_value(v)) for v in value)
            else:
                params.append((key, _query_value(value)))
        return params


class ListOptions(_QueryOptions):
    """Selectors, pagination and watch tuning for List, Watch and DeleteCollection."""

    label_selector: str | None = Field(default=None, alias="labelSelector")
    field_selector: str | None = Field(default=None, alias="fieldSelector")
    resource_version: str | None = Field(default=None, alias="resourceVersion")
    resource_version_match: Literal["Exact", "NotOlderThan"] | None = Field(
        default=None, alias="resourceVersionMatch"
    )
    timeout_seconds: int | None = Field(default=None, alias="timeoutSeconds", ge=0)
    limit: int | None = Field(default=None, ge=0)
    continue_: str | None = Field(default=None, alias="continue")
    allow_watch_bookmarks: bool | None = Field(default=None, alias="allowWatchBookmarks")
    send_initial_events: bool | None = Field(default=None, alias="sendInitialEvents")


class GetOptions(_QueryOptions):
    resource_version: str | None = Field(default=None, alias="resourceVersion")


class CreateOptions(_QueryOptions):
    dry_run: list[Literal["All"]] | None = Field(default=None, alias="dryRun")
    field_manager: str | None = Field(default=None, alias="fieldManager")
    field_validation: FieldValidation | None = Field(default=None, alias="fieldValidation")


class UpdateOptions(CreateOptions):
    pass


class PatchOptions(_QueryOptions):
    dry_run: list[Literal["All"]] | None = Field(default=None, alias="dryRun")
    force: bool | None = None
    field_manager: str | None = Field(default=None, alias="fieldManager")
    field_validation: FieldValidation | None = Field(default=None, alias="fieldValidation")


class ApplyOptions(_QueryOptions):
    """Server-side apply options. A field manager is mandatory."""

    dry_run: list[Literal["All"]] | None = Field(default=None, alias="dryRun")
    force: bool | None = None
    field_manager: str = Field(alias="fieldManager", min_length=1)


class Preconditions(BaseModel):
    """Conditions the server checks before deleting."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    uid: str | None = None
    resource_version: str | None = Field(default=None, alias="resourceVersion")


class DeleteOptions(BaseModel):
    """Options sent in the body of Delete and DeleteCollection."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    grace_period_seconds: int | None = Field(default=None, alias="gracePeriodSeconds", ge=0)
    preconditions: Preconditions | None = None
    propagation_policy: DeletionPropagation | None = Field(default=None, alias="propagationPolicy")
    dry_run: list[Literal["All"]] | None = Field(default=None, alias="dryRun")

    @field_validator("preconditions", "dry_run")
    @classmethod
    def _empty_as_unset(cls, value: Any) -> Any:
        if isinstance(value, Preconditions) and not value.model_dump(exclude_none=True):
            return None
        if isinstance(value, list) and not value:
            return None
        return value

    def is_default(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def to_body(self) -> dict[str, Any]:
        return {
            "kind": "DeleteOptions",
            "apiVersion": "meta.k8s.io/v1",
            **self.model_dump(by_alias=True, exclude_none=True),
        }
