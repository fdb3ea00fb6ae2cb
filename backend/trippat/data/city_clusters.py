"""Metro and resort clusters that the supplier splits into many city codes."""

# Cluster key (matched as a substring of the requested city) → supplier city name fragments
CITY_CLUSTERS: dict[str, tuple[str, ...]] = {
    "phuket": (
        "phuket", "mai khao", "patong", "kata", "karon", "rawai", "kamala",
        "surin", "bang tao", "nai harn", "chalong", "thalang", "cherng talay",
        "cape panwa", "cape yamu",
    ),
    "london": (
        "london", "westminster", "kensington", "chelsea", "camden",
        "tower hamlets", "southwark", "lambeth", "wandsworth", "hammersmith",
        "fulham", "islington", "hackney", "greenwich", "lewisham",
    ),
}


def cluster_aliases(city_name: str) -> tuple[str, ...] | None:
    """Return the alias list for the first cluster whose key appears in ``city_name``."""
    query = city_name.lower()
    for key, aliases in CITY_CLUSTERS.items():
        if key in query:
            return aliases
    return None
