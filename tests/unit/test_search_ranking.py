"""
Search ranking and query building tests (no database).
"""

from datetime import datetime, timezone

from archive_backend.features.archive.search import build_search_query, rank, rank_results


def doc(title, day):
    return {"title": title, "createdAt": datetime(2024, 1, day, tzinfo=timezone.utc)}


class TestRank:
    """Prefix beats substring beats other-field matches"""

    def test_rank_values(self):
        assert rank({"title": "Chilahati School"}, "chilahati") == 0
        assert rank({"title": "The Old Chilahati Bridge"}, "chilahati") == 1
        assert rank({"title": "Railway Museum"}, "chilahati") == 2

    def test_prefix_before_substring_regardless_of_age(self):
        results = rank_results([
            doc("The Old Chilahati Bridge", 20),
            doc("Chilahati School", 1),
            doc("Railway Museum", 25),
        ], "Chilahati")
        assert [item["title"] for item in results] == [
            "Chilahati School", "The Old Chilahati Bridge", "Railway Museum",
        ]

    def test_ties_broken_by_newest_first(self):
        results = rank_results([
            doc("Chilahati Market", 2),
            doc("Chilahati Mosque", 9),
            {"title": "Chilahati Pond"},
        ], "chilahati")
        assert [item["title"] for item in results] == ["Chilahati Mosque", "Chilahati Market", "Chilahati Pond"]

    def test_naive_datetimes_are_treated_as_utc(self):
        results = rank_results([
            {"title": "Chilahati A", "createdAt": datetime(2024, 1, 1)},
            doc("Chilahati B", 2),
        ], "chilahati")
        assert results[0]["title"] == "Chilahati B"


class TestBuildSearchQuery:
    def test_query_is_escaped(self):
        query = build_search_query("c++ (old)")
        assert query["$or"][0] == {"title": {"$regex": r"c\+\+\ \(old\)", "$options": "i"}}

    def test_body_blocks_limited_to_text_types(self):
        query = build_search_query("bridge")
        body_clause = next(clause for clause in query["$or"] if "bodyContent" in clause)
        assert body_clause["bodyContent"]["$elemMatch"]["type"] == {"$in": ["paragraph", "heading", "list", "quote"]}

    def test_category_specific_fields_are_searched(self):
        fields = {next(iter(clause)) for clause in build_search_query("bus")["$or"]}
        assert {"transportType", "profession", "missionStatement", "destinations"} <= fields
