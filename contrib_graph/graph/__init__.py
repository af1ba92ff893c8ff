"""
contrib_graph.graph - Contribution graph construction layer.

Modules:
    model     - UserNode / RepoNode / Link / ContributionGraph.
    builder   - create_graph() plus NetworkX and wire-format exports.
    merge     - merge_graphs(): first-occurrence-wins union.
    expansion - ExpansionController: expanded users and the derived graph.

Node types : user (Contributor), repo (Repo)
Edge types : contributed_to (contributor -> repo, weighted by contributions)
"""
