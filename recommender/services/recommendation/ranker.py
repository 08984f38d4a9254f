from recommender.models.recommendation import ScoredItem


def rank(scored: list[ScoredItem], limit: int) -> list[ScoredItem]:
    """
    Order by descending score and keep the first ``limit``.

    ``scored`` must be in canonical candidate order; the stable sort keeps it for ties.
    """
    if limit <= 0:
        return []
    return sorted(scored, key=lambda s: s.score, reverse=True)[:limit]
