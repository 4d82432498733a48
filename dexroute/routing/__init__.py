"""Multi-venue routing.

Module structure:
- types.py: PathSegment, RoutingPath, SplitRoute and ranking results
- graph.py: TokenGraph built per request from venue quotes
- scoring.py: Segment/path scores, constraint checks and selection
- splitting.py: Amount-based order splitting across distinct paths
- engine.py: RoutingEngine orchestrating the whole search
"""

from dexroute.routing.engine import RoutingEngine
from dexroute.routing.graph import TokenGraph
from dexroute.routing.scoring import (
    best_segment,
    constraint_violations,
    path_score,
    segment_score,
    select_path,
)
from dexroute.routing.splitting import build_split, find_best_split
from dexroute.routing.types import (
    CandidateRanking,
    MarketConditions,
    PathSegment,
    RejectedCandidate,
    RoutingPath,
    ScoredPath,
    SplitRoute,
)

__all__ = [
    "CandidateRanking",
    "MarketConditions",
    "PathSegment",
    "RejectedCandidate",
    "RoutingEngine",
    "RoutingPath",
    "ScoredPath",
    "SplitRoute",
    "TokenGraph",
    "best_segment",
    "build_split",
    "constraint_violations",
    "find_best_split",
    "path_score",
    "segment_score",
    "select_path",
]
