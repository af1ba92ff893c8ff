"""
contrib_graph/models.py - GitHub payload models.

Repository and User are parsed from the REST payloads of
GET /users/{username}/repos and GET /repos/{owner}/{repo}/contributors.
Only the fields the graph needs are lifted into typed attributes; the full
payload stays available on ``raw`` for renderers that want more (tooltips,
star counts, and so on).

Both models are frozen. The contributor scanner never mutates a Repository;
it produces a new one through Repository.with_contributors().
"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class User:
    """
    A GitHub account as seen on one repository's contributor list.

    Fields:
        node_id:        Stable GraphQL node identifier. The identity key for
                        graph nodes; logins can be renamed, node_ids cannot.
        login:          Human-readable handle.
        id:             Numeric REST identifier.
        avatar_url:     Avatar image URL (rendered as the node picture).
        html_url:       Profile page URL.
        contributions:  Commits attributed to this user on the repository the
                        payload came from. Repository-relative, not global.
        type:           'User', 'Bot' or 'Organization'.
        raw:            Full API payload, excluded from equality.
    """
    node_id: str
    login: str
    id: Optional[int] = None
    avatar_url: str = ""
    html_url: str = ""
    contributions: int = 0
    type: str = "User"
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "User":
        try:
            contributions = int(payload.get("contributions") or 0)
        except (TypeError, ValueError):
            contributions = 0
        return cls(
            node_id=str(payload["node_id"]),
            login=str(payload.get("login", "")),
            id=payload.get("id"),
            avatar_url=payload.get("avatar_url") or "",
            html_url=payload.get("html_url") or "",
            contributions=max(0, contributions),
            type=payload.get("type") or "User",
            raw=dict(payload),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "login": self.login,
            "id": self.id,
            "avatar_url": self.avatar_url,
            "html_url": self.html_url,
            "contributions": self.contributions,
            "type": self.type,
        }


@dataclass(frozen=True)
class Repository:
    """
    A repository owned or forked by a scanned user.

    Fields:
        node_id:       Stable GraphQL node identifier (graph identity key).
        full_name:     'owner/name'.
        name:          Repository name without the owner.
        owner:         Owner login.
        id:            Numeric REST identifier.
        description:   Free-text description, None when unset.
        html_url:      Repository page URL.
        fork:          True when the repository is a fork.
        contributors:  Contributor list added by the contributor scanner.
                       Empty on a freshly fetched repository.
        raw:           Full API payload, excluded from equality.
    """
    node_id: str
    full_name: str
    name: str = ""
    owner: str = ""
    id: Optional[int] = None
    description: Optional[str] = None
    html_url: str = ""
    fork: bool = False
    contributors: tuple[User, ...] = ()
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Repository":
        full_name = str(payload["full_name"])
        owner = (payload.get("owner") or {}).get("login") or full_name.split("/", 1)[0]
        return cls(
            node_id=str(payload["node_id"]),
            full_name=full_name,
            name=payload.get("name") or full_name.split("/", 1)[-1],
            owner=owner,
            id=payload.get("id"),
            description=payload.get("description"),
            html_url=payload.get("html_url") or "",
            fork=bool(payload.get("fork", False)),
            raw=dict(payload),
        )

    def owner_and_name(self) -> tuple[str, str]:
        return split_full_name(self.full_name)

    def with_contributors(self, contributors: Iterable[User]) -> "Repository":
        """Return a copy annotated with *contributors*."""
        return replace(self, contributors=tuple(contributors))

    def has_contributor(self, login: str) -> bool:
        return any(c.login == login for c in self.contributors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "full_name": self.full_name,
            "name": self.name,
            "owner": self.owner,
            "id": self.id,
            "description": self.description,
            "html_url": self.html_url,
            "fork": self.fork,
        }


def split_full_name(full_name: str) -> tuple[str, str]:
    """
    Split 'owner/name' into ('owner', 'name').

    Raises:
        ValueError: If full_name has no '/' or an empty side.
    """
    owner, sep, name = full_name.partition("/")
    if not sep or not owner or not name:
        raise ValueError(f"Expected 'owner/name', got {full_name!r}")
    return owner, name
