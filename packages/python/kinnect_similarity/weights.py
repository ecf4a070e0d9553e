from types import MappingProxyType

# Interaction channels that feed pairwise user similarity.
SIMILARITY_WEIGHTS = MappingProxyType(
    {
        "likes": 0.30,
        "comments": 0.25,
        "follows": 0.15,
        "joins": 0.10,
    }
)

# Declared alongside the others but not scored: no share interactions are
# recorded yet, so a shared-post channel would always contribute 0.
UNSCORED_WEIGHTS = MappingProxyType({"shares": 0.20})

# Upper bound of a similarity score; sum of the scored weights.
USED_WEIGHT_TOTAL = 0.80
