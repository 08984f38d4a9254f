from pydantic import BaseModel, Field

from recommender.models.item import Item


class TermWeights(BaseModel):
    """
    Per-request term weights derived from a profile.

    Both maps keep first-insertion order, which is the tie-break when selecting terms.
    """

    tag_weight: dict[str, int] = Field(default_factory=dict, description="Tag → accumulated weight")
    cast_weight: dict[str, int] = Field(default_factory=dict, description="Cast member → accumulated weight")


class QueryPlan(BaseModel):
    tag_terms: list[str] = Field(default_factory=list)
    cast_terms: list[str] = Field(default_factory=list)
    weights: TermWeights = Field(default_factory=TermWeights)
    favorite_tags: frozenset[str] = Field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.tag_terms and not self.cast_terms


class ScoredItem(BaseModel):
    item: Item
    score: float = Field(ge=0)


class RecommendationRun(BaseModel):
    """Outcome of one coordinated computation for a user."""

    generation: int
    superseded: bool = False
    recommendations: list[ScoredItem] = Field(default_factory=list)
