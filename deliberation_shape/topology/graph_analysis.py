"""Graph analysis over claim ids and typed edges.

Components, longest prerequisite chain, hub dominance, articulation points,
and two cohesion metrics. Results are reported in claim order so the output
does not depend on networkx iteration order.
"""

from __future__ import annotations

import networkx as nx

from deliberation_shape.contracts import Edge, EnrichedClaim, GraphAnalysis

HUB_MIN_OUT_DEGREE = 2
HUB_MIN_DOMINANCE = 1.5
HUB_SOLE_DOMINANCE = 10.0  # reported when no second-ranked claim has out-degree

REINFORCING = ("supports", "prerequisite")


def _known_edges(claim_ids: list[str], edges: list[Edge], types=None) -> list[tuple[str, str]]:
    known = set(claim_ids)
    return [
        (e["from"], e["to"])
        for e in edges
        if e["from"] in known and e["to"] in known and (types is None or e["type"] in types)
    ]


def _undirected(claim_ids: list[str], edges: list[Edge]) -> nx.Graph:
    g = nx.Graph()
    g.add_nodes_from(claim_ids)
    g.add_edges_from(_known_edges(claim_ids, edges))
    return g


def _directed(claim_ids: list[str], edges: list[Edge], types=None) -> nx.MultiDiGraph:
    # Multi-edges keep a supports + prerequisite pair counted twice
    g = nx.MultiDiGraph()
    g.add_nodes_from(claim_ids)
    g.add_edges_from(_known_edges(claim_ids, edges, types))
    return g


def compute_connected_components(claim_ids: list[str], edges: list[Edge]) -> list[list[str]]:
    """Connected components, treating every edge type as undirected."""
    position = {cid: i for i, cid in enumerate(claim_ids)}
    components = [
        sorted(component, key=position.__getitem__)
        for component in nx.connected_components(_undirected(claim_ids, edges))
    ]
    return sorted(components, key=lambda component: position[component[0]])


def compute_longest_chain(claim_ids: list[str], edges: list[Edge]) -> list[str]:
    """Longest path along prerequisite edges.

    Searches from roots (no incoming prerequisite). Only nodes on the current
    path are excluded, so alternate branches from a shared ancestor are still
    explored. With no roots (every node on a cycle) every node is tried.
    """
    prereq = nx.DiGraph()
    prereq.add_nodes_from(claim_ids)
    prereq.add_edges_from(_known_edges(claim_ids, edges, ("prerequisite",)))

    def longest_from(root: str) -> list[str]:
        best: list[str] = [root]
        # (path, index of next child to try)
        stack: list[tuple[list[str], int]] = [([root], 0)]
        while stack:
            path, child_index = stack.pop()
            kids = list(prereq.successors(path[-1]))
            if child_index < len(kids):
                stack.append((path, child_index + 1))
                child = kids[child_index]
                if child not in path:
                    stack.append((path + [child], 0))
            elif len(path) > len(best):
                best = path
        return best

    longest: list[str] = []
    roots = [cid for cid in claim_ids if prereq.in_degree(cid) == 0]
    for root in roots:
        chain = longest_from(root)
        if len(chain) > len(longest):
            longest = chain

    if not longest:
        for cid in claim_ids:
            chain = longest_from(cid)
            if len(chain) > len(longest):
                longest = chain

    return longest


def find_articulation_points(claim_ids: list[str], edges: list[Edge]) -> list[str]:
    """Cut vertices of the undirected claim graph, in claim order."""
    points = set(nx.articulation_points(_undirected(claim_ids, edges)))
    return [cid for cid in claim_ids if cid in points]


def _hub(reinforcing: nx.MultiDiGraph, claim_ids: list[str]) -> tuple[str | None, float]:
    # Stable sort keeps claim order among ties
    ranked = sorted(
        ((cid, reinforcing.out_degree(cid)) for cid in claim_ids),
        key=lambda item: item[1],
        reverse=True,
    )
    if not ranked:
        return None, 0.0
    top_id, top_out = ranked[0]
    second_out = ranked[1][1] if len(ranked) > 1 else 0

    if second_out > 0:
        dominance = top_out / second_out
    else:
        dominance = HUB_SOLE_DOMINANCE if top_out > 0 else 0.0

    is_hub = dominance >= HUB_MIN_DOMINANCE and top_out >= HUB_MIN_OUT_DEGREE
    return (top_id if is_hub else None), dominance


def _cluster_cohesion(reinforcing: nx.MultiDiGraph, claims: list[EnrichedClaim]) -> float:
    high = reinforcing.subgraph(c["id"] for c in claims if c["is_high_support"])
    if high.number_of_nodes() <= 1:
        return 1.0
    return nx.density(high)


def _local_coherence(
    full: nx.MultiDiGraph, components: list[list[str]], claims: list[EnrichedClaim]
) -> float:
    ratio_by_id = {c["id"]: c["support_ratio"] for c in claims}
    total = 0.0
    weighted = 0
    for component in components:
        size = len(component)
        if size < 2:
            continue
        avg_support = sum(ratio_by_id.get(cid, 0.0) for cid in component) / size
        total += nx.density(full.subgraph(component)) * avg_support * size
        weighted += size
    return total / weighted if weighted else 0.0


def analyze_graph(
    claim_ids: list[str], edges: list[Edge], claims: list[EnrichedClaim]
) -> GraphAnalysis:
    """Whole-population graph description."""
    components = compute_connected_components(claim_ids, edges)
    full = _directed(claim_ids, edges)
    reinforcing = _directed(claim_ids, edges, REINFORCING)
    prereq = _directed(claim_ids, edges, ("prerequisite",))
    hub_claim, hub_dominance = _hub(reinforcing, claim_ids)

    chain_count = sum(
        1 for cid in claim_ids if prereq.out_degree(cid) > 0 and prereq.in_degree(cid) == 0
    )

    return GraphAnalysis(
        component_count=len(components),
        components=components,
        longest_chain=compute_longest_chain(claim_ids, edges),
        chain_count=chain_count,
        hub_claim=hub_claim,
        hub_dominance=round(hub_dominance, 4),
        articulation_points=find_articulation_points(claim_ids, edges),
        cluster_cohesion=round(_cluster_cohesion(reinforcing, claims), 4),
        local_coherence=round(_local_coherence(full, components, claims), 4),
    )
