from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from resource_pulse.client import ApiError, ResourcePulseClient
from resource_pulse.ingest import (
    Snapshot,
    parse_allocation,
    parse_project,
    parse_resource,
    parse_skill,
)
from resource_pulse.models import Allocation, Project, Resource, Skill

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class SkillValidationError(ValueError):
    """Skill form data rejected before it reaches the backend."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class SkillInUseError(RuntimeError):
    """Deleting a skill that resources or projects still reference."""


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))


def paginate(items: Sequence[T], page: int = 1, per_page: int = 10) -> Page[T]:
    """Slice `items` into 1-based pages. Out-of-range pages are empty."""
    if per_page <= 0:
        raise ValueError("per_page must be > 0.")
    if page < 1:
        raise ValueError("page must be >= 1.")
    start = (page - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=page,
        per_page=per_page,
        total=len(items),
    )


def _matches(term: str, *fields: Optional[str]) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    return any(f is not None and needle in f.lower() for f in fields)


class _Repository:
    """Common refresh/error bookkeeping for the in-memory collections."""

    def __init__(self, client: ResourcePulseClient) -> None:
        self.client = client
        self.last_error: Optional[ApiError] = None
        self.categories: dict[str, Optional[str]] = {}

    def _load(self) -> None:
        raise NotImplementedError

    def _clear(self) -> None:
        raise NotImplementedError

    def refresh(self, fail_silently: bool = False) -> None:
        """
        Refetch the collection. With `fail_silently` a failed request leaves an
        empty collection and records the error in `last_error`.
        """
        try:
            self._load()
        except ApiError as exc:
            self.last_error = exc
            self._clear()
            if not fail_silently:
                raise
            _logger.warning("%s refresh failed: %s", type(self).__name__, exc)
        else:
            self.last_error = None


class SkillsRepository(_Repository):
    def __init__(self, client: ResourcePulseClient) -> None:
        super().__init__(client)
        self.skills: list[Skill] = []

    def _load(self) -> None:
        self.skills = [parse_skill(raw) for raw in self.client.list_skills()]
        for sk in self.skills:
            if sk.category is not None:
                self.categories[sk.name] = sk.category

    def _clear(self) -> None:
        self.skills = []

    def get(self, skill_id: Any) -> Optional[Skill]:
        return next((s for s in self.skills if s.id == skill_id), None)

    def category_names(self) -> list[str]:
        return sorted({s.category for s in self.skills if s.category})

    def search(
        self,
        term: str = "",
        category: Optional[str] = None,
        active_only: bool = False,
    ) -> list[Skill]:
        out = [
            s
            for s in self.skills
            if _matches(term, s.name, s.category)
            and (category is None or s.category == category)
            and (not active_only or s.is_active)
        ]
        return sorted(out, key=lambda s: s.name.lower())

    def validate(self, payload: dict[str, Any], skill_id: Any = None) -> dict[str, Any]:
        """Return a cleaned payload or raise SkillValidationError."""
        errors: dict[str, str] = {}
        name = str(payload.get("name") or "").strip()
        if not name:
            errors["name"] = "Skill name is required"
        elif any(
            s.name.lower() == name.lower() and s.id != skill_id for s in self.skills
        ):
            errors["name"] = f"A skill named '{name}' already exists"
        if errors:
            raise SkillValidationError(errors)

        cleaned = dict(payload)
        cleaned["name"] = name
        category = str(payload.get("category") or "").strip()
        cleaned["category"] = category or None
        cleaned.setdefault("isActive", True)
        return cleaned

    def create(self, payload: dict[str, Any]) -> Skill:
        body = self.validate(payload)
        created = parse_skill(self.client.create_skill(body))
        self.skills.append(created)
        _logger.info("Created skill %s (%s)", created.name, created.id)
        return created

    def update(self, skill_id: Any, payload: dict[str, Any]) -> Skill:
        if self.get(skill_id) is None:
            raise KeyError(f"Unknown skill id {skill_id!r}")
        body = self.validate(payload, skill_id=skill_id)
        updated = parse_skill(self.client.update_skill(skill_id, body))
        self.skills = [updated if s.id == skill_id else s for s in self.skills]
        return updated

    def delete(
        self,
        skill_id: Any,
        resources: Sequence[Resource] = (),
        projects: Sequence[Project] = (),
    ) -> None:
        """
        Delete a skill unless something still references it, either by the
        backend-reported counts or by the given in-memory collections.
        """
        skill = self.get(skill_id)
        if skill is None:
            raise KeyError(f"Unknown skill id {skill_id!r}")
        held = sum(1 for r in resources if skill.name in r.skills)
        needed = sum(1 for p in projects if skill.name in p.required_skills)
        if skill.in_use or held or needed:
            raise SkillInUseError(
                f"Skill '{skill.name}' is used by "
                f"{max(held, skill.resource_count)} resource(s) and "
                f"{max(needed, skill.project_count)} project(s)"
            )
        self.client.delete_skill(skill_id)
        self.skills = [s for s in self.skills if s.id != skill_id]


class ResourceRepository(_Repository):
    def __init__(self, client: ResourcePulseClient) -> None:
        super().__init__(client)
        self.resources: list[Resource] = []

    def _load(self) -> None:
        self.resources = [
            parse_resource(raw, self.categories) for raw in self.client.list_resources()
        ]

    def _clear(self) -> None:
        self.resources = []

    def get(self, resource_id: Any) -> Optional[Resource]:
        return next((r for r in self.resources if r.id == resource_id), None)

    def search(self, term: str = "", role: Optional[str] = None) -> list[Resource]:
        out = [
            r
            for r in self.resources
            if (_matches(term, r.name, r.role) or _matches(term, *r.skills))
            and (role is None or r.role == role)
        ]
        return sorted(out, key=lambda r: r.name.lower())

    def _require(self, resource_id: Any) -> Resource:
        resource = self.get(resource_id)
        if resource is None:
            raise KeyError(f"Unknown resource id {resource_id!r}")
        return resource

    def create(self, payload: dict[str, Any]) -> Resource:
        created = parse_resource(self.client.create_resource(payload), self.categories)
        self.resources.append(created)
        _logger.info("Created resource %s (%s)", created.name, created.id)
        return created

    def update(self, resource_id: Any, payload: dict[str, Any]) -> Resource:
        self._require(resource_id)
        raw = self.client.update_resource(resource_id, payload)
        updated = parse_resource(raw, self.categories)
        self.resources = [updated if r.id == resource_id else r for r in self.resources]
        return updated

    def delete(self, resource_id: Any) -> None:
        self._require(resource_id)
        self.client.delete_resource(resource_id)
        self.resources = [r for r in self.resources if r.id != resource_id]

    def add_allocation(self, resource_id: Any, payload: dict[str, Any]) -> Allocation:
        """Assign the resource to a project; the stored row is the server's."""
        resource = self._require(resource_id)
        raw = self.client.update_allocation(resource_id, payload)
        allocation = parse_allocation(raw)
        resource.allocations.append(allocation)
        return allocation

    def update_allocation(
        self, resource_id: Any, payload: dict[str, Any]
    ) -> Optional[Allocation]:
        """
        Change an existing allocation, matched by its id. A payload whose
        `projectId` is None removes the allocation instead.
        """
        resource = self._require(resource_id)
        allocation_id = payload.get("id")
        if "projectId" in payload and payload["projectId"] is None:
            self.client.remove_allocation(resource_id, allocation_id)
            resource.allocations = [
                a for a in resource.allocations if a.id != allocation_id
            ]
            return None

        raw = self.client.update_allocation(resource_id, payload)
        allocation = parse_allocation(raw)
        for i, a in enumerate(resource.allocations):
            if a.id is not None and a.id == allocation.id:
                resource.allocations[i] = allocation
                break
        else:
            resource.allocations.append(allocation)
        return allocation


class ProjectRepository(_Repository):
    def __init__(self, client: ResourcePulseClient) -> None:
        super().__init__(client)
        self.projects: list[Project] = []

    def _load(self) -> None:
        self.projects = [
            parse_project(raw, self.categories) for raw in self.client.list_projects()
        ]

    def _clear(self) -> None:
        self.projects = []

    def get(self, project_id: Any) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def search(self, term: str = "", client: Optional[str] = None) -> list[Project]:
        out = [
            p
            for p in self.projects
            if _matches(term, p.name, p.client)
            and (client is None or p.client == client)
        ]
        return sorted(out, key=lambda p: p.name.lower())

    def _require(self, project_id: Any) -> Project:
        project = self.get(project_id)
        if project is None:
            raise KeyError(f"Unknown project id {project_id!r}")
        return project

    def create(self, payload: dict[str, Any]) -> Project:
        created = parse_project(self.client.create_project(payload), self.categories)
        self.projects.append(created)
        _logger.info("Created project %s (%s)", created.name, created.id)
        return created

    def update(self, project_id: Any, payload: dict[str, Any]) -> Project:
        self._require(project_id)
        raw = self.client.update_project(project_id, payload)
        updated = parse_project(raw, self.categories)
        self.projects = [updated if p.id == project_id else p for p in self.projects]
        return updated

    def delete(self, project_id: Any) -> None:
        self._require(project_id)
        self.client.delete_project(project_id)
        self.projects = [p for p in self.projects if p.id != project_id]


def session_snapshot(
    skills: SkillsRepository,
    resources: ResourceRepository,
    projects: ProjectRepository,
    overall_gap_score: Optional[float] = None,
) -> Snapshot:
    """Freeze the repositories' current collections into one Snapshot."""
    categories = {**resources.categories, **projects.categories, **skills.categories}
    return Snapshot(
        resources=list(resources.resources),
        projects=list(projects.projects),
        skills=list(skills.skills),
        skill_categories=categories,
        overall_gap_score=overall_gap_score,
    )
