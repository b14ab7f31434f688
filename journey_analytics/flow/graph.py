from collections import Counter
from typing import Dict, Iterable, Tuple

from journey_analytics.core.models import FlowEdge, FlowGraph, FlowNode, FlowOutcome, Session

MAX_EDGES = 50


def session_outcome(session: Session) -> FlowOutcome:
    if session.converted:
        return FlowOutcome.CHECKOUT
    if session.added_to_cart:
        return FlowOutcome.CART
    return FlowOutcome.EXIT


def build_flow_graph(sessions: Iterable[Session], max_edges: int = MAX_EDGES) -> FlowGraph:
    """
    Query-to-query transition graph with terminal outcome nodes.

    Every consecutive pair of searches is one transition; the last search
    of each session points at its outcome (Checkout, Cart or Exit). Only
    the heaviest max_edges edges are returned. Nodes cover every
    transition seen, in first-seen order.
    """
    transitions: Counter = Counter()

    for session in sessions:
        searches = session.searches
        if not searches:
            continue
        labels = [s.original_query or s.query for s in searches]
        for prev, curr in zip(labels, labels[1:]):
            transitions[(prev, curr)] += 1
        transitions[(labels[-1], session_outcome(session).value)] += 1

    names: Dict[str, None] = {}
    for source, target in transitions:
        names.setdefault(source)
        names.setdefault(target)

    ranked: Iterable[Tuple[Tuple[str, str], int]] = sorted(
        transitions.items(), key=lambda item: item[1], reverse=True
    )

    return FlowGraph(
        nodes=[FlowNode(id=name, name=name) for name in names],
        links=[
            FlowEdge(source=source, target=target, value=value)
            for (source, target), value in list(ranked)[:max_edges]
        ],
    )
