"""
Leaderboards: top-N municipalities per dataset and by combined score.

Modules
-------
ranker : RankingEntry dataclass + rank_single_metric() + rank_combined()
         + build_rankings().
"""
