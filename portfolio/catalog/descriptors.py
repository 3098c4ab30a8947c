"""
Entity descriptors for every portfolio collection.
Each descriptor is a frozen configuration record: the allow-listed fields a caller may
filter and sort on, the free-text strategy, default ordering, reference population for
list and detail reads, and the visibility overlay applied to unprivileged callers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from types import MappingProxyType

from portfolio.catalog.query_plan import Condition, FieldKind, FieldSpec, Op
from portfolio.catalog.timestamps import format_timestamp

STRING = FieldKind.STRING
ENUM = FieldKind.ENUM
NUMBER = FieldKind.NUMBER
BOOLEAN = FieldKind.BOOLEAN
DATE = FieldKind.DATE
STRING_LIST = FieldKind.STRING_LIST
REFERENCE = FieldKind.REFERENCE
REFERENCE_LIST = FieldKind.REFERENCE_LIST

PRIVILEGED_ROLES = frozenset({"Admin"})

VisibilityOverlay = Callable[[datetime], tuple[Condition, ...]]


@dataclass(frozen=True)
class PopulateSpec:
    """Replace reference ids at `path` with a field subset of the target document."""

    path: str
    collection: str
    fields: tuple[str, ...]
    nested: tuple[PopulateSpec, ...] = ()


@dataclass(frozen=True)
class EntityDescriptor:
    key: str
    collection: str
    label: str
    fields: tuple[FieldSpec, ...]
    unique_field: str | None = None
    text_fields: tuple[str, ...] = ()
    regex_fields: tuple[str, ...] = ()
    default_sort: str = "-createdAt"
    list_populate: tuple[PopulateSpec, ...] = ()
    detail_populate: tuple[PopulateSpec, ...] = ()
    visibility: VisibilityOverlay | None = None
    filter_aliases: Mapping[str, str] = field(default_factory=dict)
    has_featured: bool = True

    @cached_property
    def field_map(self) -> Mapping[str, FieldSpec]:
        base = {
            "id": FieldSpec("id", REFERENCE),
            "createdAt": FieldSpec("createdAt", DATE),
            "updatedAt": FieldSpec("updatedAt", DATE),
        }
        base.update({spec.name: spec for spec in self.fields})
        return MappingProxyType(base)

    def resolve_field(self, name: str) -> FieldSpec | None:
        return self.field_map.get(self.filter_aliases.get(name, name))

    def overlay(self, now: datetime, *, role: str | None) -> tuple[Condition, ...]:
        if self.visibility is None or role in PRIVILEGED_ROLES:
            return ()
        return self.visibility(now)

    def search_field_specs(self) -> tuple[FieldSpec, ...]:
        names = self.text_fields or self.regex_fields
        return tuple(self.text_spec(name) for name in names)

    def text_spec(self, name: str) -> FieldSpec:
        """Declared spec for a searchable field, so array fields match per element."""

        return self.field_map.get(name) or FieldSpec(name, STRING)


def _fields(*specs: tuple[str, FieldKind]) -> tuple[FieldSpec, ...]:
    return tuple(FieldSpec(name, kind) for name, kind in specs)


def published_blog_overlay(now: datetime) -> tuple[Condition, ...]:
    return (
        Condition(FieldSpec("status", ENUM), Op.EQ, "Published"),
        Condition(FieldSpec("publishedDate", DATE), Op.LTE, format_timestamp(now)),
    )


def approved_testimonial_overlay(_: datetime) -> tuple[Condition, ...]:
    return (Condition(FieldSpec("approved", BOOLEAN), Op.EQ, True),)


_CLIENT_BRIEF = PopulateSpec("client", "clients", ("name", "logo"))

SERVICES = EntityDescriptor(
    key="services",
    collection="services",
    label="Service",
    unique_field="name",
    fields=_fields(
        ("name", STRING),
        ("shortDescription", STRING),
        ("category", ENUM),
        ("featured", BOOLEAN),
        ("tags", STRING_LIST),
        ("priceRange", STRING),
        ("relatedProjects", REFERENCE_LIST),
    ),
    text_fields=("name", "description", "shortDescription", "tags"),
    detail_populate=(
        PopulateSpec(
            "relatedProjects",
            "projects",
            ("title", "shortDescription", "thumbnail", "category", "tags", "completionDate"),
            nested=(_CLIENT_BRIEF,),
        ),
    ),
)

PROJECTS = EntityDescriptor(
    key="projects",
    collection="projects",
    label="Project",
    unique_field="title",
    fields=(
        *_fields(
            ("title", STRING),
            ("category", ENUM),
            ("status", ENUM),
            ("priority", ENUM),
            ("featured", BOOLEAN),
            ("tags", STRING_LIST),
            ("technologies", STRING_LIST),
            ("client", REFERENCE),
            ("servicesUsed", REFERENCE_LIST),
            ("startDate", DATE),
            ("completionDate", DATE),
            ("estimatedCompletionDate", DATE),
            ("budget", STRING),
            ("location.city", STRING),
            ("location.country", STRING),
        ),
        FieldSpec("teamMembers.member", REFERENCE_LIST, ("teamMembers",), item_key="member"),
    ),
    text_fields=("title", "shortDescription", "fullDescription", "tags"),
    filter_aliases=MappingProxyType({"teamMember": "teamMembers.member", "service": "servicesUsed"}),
    list_populate=(
        PopulateSpec("client", "clients", ("name", "logo", "industry")),
        PopulateSpec(
            "teamMembers.member",
            "team_members",
            ("firstName", "lastName", "position", "profileImage"),
        ),
        PopulateSpec("servicesUsed", "services", ("name", "category", "icon")),
    ),
    detail_populate=(
        PopulateSpec(
            "client",
            "clients",
            ("name", "logo", "industry", "website", "description", "contactPerson"),
        ),
        PopulateSpec(
            "teamMembers.member",
            "team_members",
            ("firstName", "lastName", "position", "profileImage", "bio", "skills"),
        ),
        PopulateSpec("servicesUsed", "services", ("name", "description", "category", "icon")),
    ),
)

CLIENTS = EntityDescriptor(
    key="clients",
    collection="clients",
    label="Client",
    unique_field="name",
    fields=_fields(
        ("name", STRING),
        ("industry", STRING),
        ("featured", BOOLEAN),
        ("companySize", ENUM),
        ("contactEmail", STRING),
        ("projects", REFERENCE_LIST),
        ("partnership.status", ENUM),
        ("partnership.type", ENUM),
        ("partnership.startDate", DATE),
        ("location.city", STRING),
        ("location.state", STRING),
        ("location.country", STRING),
    ),
    regex_fields=(
        "name",
        "industry",
        "description",
        "contactPerson.name",
        "location.city",
        "location.country",
    ),
    detail_populate=(
        PopulateSpec(
            "projects",
            "projects",
            (
                "title",
                "shortDescription",
                "thumbnail",
                "category",
                "status",
                "startDate",
                "completionDate",
            ),
            nested=(PopulateSpec("servicesUsed", "services", ("name", "category")),),
        ),
    ),
)

TEAM_MEMBERS = EntityDescriptor(
    key="team-members",
    collection="team_members",
    label="Team member",
    unique_field="email",
    fields=_fields(
        ("firstName", STRING),
        ("lastName", STRING),
        ("email", STRING),
        ("position", STRING),
        ("skills", STRING_LIST),
        ("featured", BOOLEAN),
        ("currentTeam", REFERENCE),
        ("relatedProjects", REFERENCE_LIST),
    ),
    regex_fields=("firstName", "lastName", "position", "skills", "bio"),
    list_populate=(PopulateSpec("currentTeam", "teams", ("teamName",)),),
    detail_populate=(
        PopulateSpec("currentTeam", "teams", ("teamName", "description")),
        PopulateSpec(
            "relatedProjects",
            "projects",
            ("title", "shortDescription", "thumbnail", "category", "completionDate"),
            nested=(_CLIENT_BRIEF,),
        ),
    ),
)

TEAMS = EntityDescriptor(
    key="teams",
    collection="teams",
    label="Team",
    unique_field="teamName",
    has_featured=False,
    fields=_fields(
        ("teamName", STRING),
        ("tags", STRING_LIST),
        ("specialties", STRING_LIST),
        ("isActive", BOOLEAN),
        ("teamLead", REFERENCE),
        ("members", REFERENCE_LIST),
        ("relatedProjects", REFERENCE_LIST),
    ),
    regex_fields=("teamName", "description", "tags"),
    list_populate=(
        PopulateSpec(
            "members",
            "team_members",
            ("firstName", "lastName", "position", "profileImage", "skills"),
        ),
        PopulateSpec("teamLead", "team_members", ("firstName", "lastName", "position", "profileImage")),
        PopulateSpec("relatedProjects", "projects", ("title", "thumbnail", "completionDate")),
    ),
    detail_populate=(
        PopulateSpec(
            "members",
            "team_members",
            ("firstName", "lastName", "position", "profileImage", "skills", "bio", "experience"),
        ),
        PopulateSpec(
            "teamLead",
            "team_members",
            ("firstName", "lastName", "position", "profileImage", "bio"),
        ),
        PopulateSpec(
            "relatedProjects",
            "projects",
            ("title", "shortDescription", "thumbnail", "category", "completionDate", "status"),
            nested=(_CLIENT_BRIEF,),
        ),
    ),
)

_AUTHOR_CARD = PopulateSpec(
    "author", "team_members", ("firstName", "lastName", "position", "profileImage")
)

BLOGS = EntityDescriptor(
    key="blog",
    collection="blogs",
    label="Blog post",
    unique_field="title",
    fields=_fields(
        ("title", STRING),
        ("slug", STRING),
        ("author", REFERENCE),
        ("category", ENUM),
        ("status", ENUM),
        ("featured", BOOLEAN),
        ("tags", STRING_LIST),
        ("publishedDate", DATE),
        ("views", NUMBER),
        ("likes", NUMBER),
        ("readTimeMinutes", NUMBER),
    ),
    text_fields=("title", "content", "excerpt", "tags"),
    default_sort="-publishedDate,-createdAt",
    visibility=published_blog_overlay,
    list_populate=(_AUTHOR_CARD,),
    detail_populate=(
        PopulateSpec(
            "author",
            "team_members",
            ("firstName", "lastName", "position", "profileImage", "bio"),
        ),
        PopulateSpec(
            "relatedPosts", "blogs", ("title", "slug", "thumbnail", "publishedDate", "category")
        ),
    ),
)

TESTIMONIALS = EntityDescriptor(
    key="testimonials",
    collection="testimonials",
    label="Testimonial",
    fields=_fields(
        ("clientName", STRING),
        ("clientCompany", STRING),
        ("rating", NUMBER),
        ("featured", BOOLEAN),
        ("approved", BOOLEAN),
        ("verified", BOOLEAN),
        ("serviceCategory", ENUM),
        ("source", ENUM),
        ("relatedProject", REFERENCE),
        ("client", REFERENCE),
        ("dateGiven", DATE),
        ("tags", STRING_LIST),
    ),
    regex_fields=("clientName", "clientCompany", "quote"),
    default_sort="-dateGiven,-createdAt",
    visibility=approved_testimonial_overlay,
    list_populate=(
        PopulateSpec("relatedProject", "projects", ("title", "category", "thumbnail")),
        PopulateSpec("client", "clients", ("name", "logo", "industry")),
    ),
    detail_populate=(
        PopulateSpec("relatedProject", "projects", ("title", "category", "thumbnail")),
        PopulateSpec("client", "clients", ("name", "logo", "industry")),
    ),
)

CONTACT_SUBMISSIONS = EntityDescriptor(
    key="contact",
    collection="contact_submissions",
    label="Contact submission",
    has_featured=False,
    fields=_fields(
        ("name", STRING),
        ("email", STRING),
        ("company", STRING),
        ("status", ENUM),
        ("priority", ENUM),
        ("inquiryType", ENUM),
        ("source", ENUM),
        ("budget", ENUM),
        ("timeline", ENUM),
        ("interestedServices", STRING_LIST),
        ("tags", STRING_LIST),
        ("assignedTo", REFERENCE),
        ("followUpDate", DATE),
        ("responseDate", DATE),
        ("conversionDate", DATE),
        ("submittedAt", DATE),
        ("isSubscribedToNewsletter", BOOLEAN),
    ),
    regex_fields=("name", "email", "company", "subject", "message"),
    default_sort="-submittedAt",
    list_populate=(
        PopulateSpec("assignedTo", "team_members", ("firstName", "lastName", "position")),
    ),
    detail_populate=(
        PopulateSpec("assignedTo", "team_members", ("firstName", "lastName", "position")),
    ),
)

USERS = EntityDescriptor(
    key="users",
    collection="users",
    label="User",
    unique_field="email",
    has_featured=False,
    fields=_fields(
        ("username", STRING),
        ("email", STRING),
        ("role", ENUM),
        ("isActive", BOOLEAN),
    ),
)

DESCRIPTORS: Mapping[str, EntityDescriptor] = MappingProxyType(
    {
        descriptor.key: descriptor
        for descriptor in (
            SERVICES,
            PROJECTS,
            CLIENTS,
            TEAM_MEMBERS,
            TEAMS,
            BLOGS,
            TESTIMONIALS,
            CONTACT_SUBMISSIONS,
            USERS,
        )
    }
)

COLLECTIONS: tuple[str, ...] = tuple(descriptor.collection for descriptor in DESCRIPTORS.values())
