"""
contrib_graph/graph/model.py - Node and link types for the contribution graph.

Node is a sum type with two variants:

    UserNode   a contributor (type='user')
    RepoNode   a repository  (type='repo')

Both are keyed by the API's node_id, never by login or name; logins can be
renamed and repository names collide across owners. Links run
contributor -> repository and carry the contribution count used for visual
weighting.
"""

from dataclasses import dataclass, field
from typing import Union

from contrib_graph.models import Repository, User

USER_NODE = "user"
REPO_NODE = "repo"


@dataclass(frozen=True)
class UserNode:
    node_id: str
    user: User
    type: str = field(default=USER_NODE, init=False)

    @property
    def id(self) -> str:
        """Render-engine key."""
        return self.node_id

    @property
    def label(self) -> str:
        return self.user.login


@dataclass(frozen=True)
class RepoNode:
    node_id: str
    repo: Repository
    type: str = field(default=REPO_NODE, init=False)

    @property
    def id(self) -> str:
        """Render-engine key."""
        return self.node_id

    @property
    def label(self) -> str:
        return self.repo.full_name


Node = Union[UserNode, RepoNode]


@dataclass(frozen=True)
class Link:
    """
    A contributor -> repository edge.

    Fields:
        node_id:       node_id of the target repository. Part of the identity
                       key so the same pair produced by different scans
                       collapses while edges to other repositories never do.
        source:        Contributor node_id.
        target:        Repository node_id.
        contributions: Commits by source on target.
    """
    node_id: str
    source: str
    target: str
    contributions: int = 0

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.node_id, self.source, self.target)


@dataclass
class ContributionGraph:
    """
    De-duplicated node/link set handed to the renderer.

    Invariants (maintained by create_graph and merge_graphs):
        - nodes are unique by node_id
        - links are unique by (node_id, source, target)
        - order is first-occurrence order
    """
    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    @property
    def user_nodes(self) -> list[UserNode]:
        return [n for n in self.nodes if isinstance(n, UserNode)]

    @property
    def repo_nodes(self) -> list[RepoNode]:
        return [n for n in self.nodes if isinstance(n, RepoNode)]

    def node(self, node_id: str) -> Node:
        """Look up a node by node_id. Raises KeyError when absent."""
        for n in self.nodes:
            if n.node_id == node_id:
                return n
        raise KeyError(node_id)

    def find_user(self, login: str) -> UserNode:
        """Look up a user node by login. Raises KeyError when absent."""
        for n in self.user_nodes:
            if n.user.login == login:
                return n
        raise KeyError(login)

    def __len__(self) -> int:
        return len(self.nodes)
