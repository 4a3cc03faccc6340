"""
Public archive API tests: category resolution, sub-type pages, entries and search.
"""

import json

import pytest

pytestmark = pytest.mark.integration


class TestCategoryResolution:
    """GET /api/archive/{category}"""

    def test_sub_types_are_the_distinct_stored_values(self, client, insert_item):
        insert_item(category="transport", transportType="train", title="Rail")
        insert_item(category="transport", transportType="bus", title="Bus A")
        insert_item(category="transport", transportType="bus", title="Bus B")

        body = client.get("/api/archive/transport").json()

        assert body["type"] == "sub-categories"
        assert body["subTypes"] == ["bus", "train"]
        assert body["category"] == "transport"
        assert body["title"] == "Explore Transport"

    def test_category_without_sub_types_is_a_list(self, client, insert_item):
        insert_item(category="history", title="Partition", thumbnail="https://drive.google.com/open?id=T1")
        insert_item(category="history", title="Railway Era")

        body = client.get("/api/archive/history").json()

        assert body["type"] == "list"
        assert [item["title"] for item in body["items"]] == ["Railway Era", "Partition"]
        assert body["items"][1]["thumbnail"] == "https://lh3.googleusercontent.com/d/T1"

    def test_mapped_category_with_no_values_falls_back_to_list(self, client, insert_item):
        insert_item(category="institution", title="Unsorted School")

        body = client.get("/api/archive/institution").json()

        assert body["type"] == "list"
        assert len(body["items"]) == 1

    def test_unmapped_category_scans_stored_sub_types(self, client, insert_item):
        insert_item(category="social works", subType="blood bank", title="Blood Bank")

        body = client.get("/api/archive/social-works").json()

        assert body["type"] == "sub-categories"
        assert body["subTypes"] == ["blood bank"]

    def test_category_match_ignores_case(self, client, insert_item):
        insert_item(category="emergency services", serviceType="police", title="Police Station")

        body = client.get("/api/archive/emergency-services").json()

        assert body["type"] == "sub-categories"
        assert body["subTypes"] == ["police"]

    def test_unknown_category(self, client):
        response = client.get("/api/archive/planets")
        assert response.status_code == 404

    def test_taxonomy(self, client):
        categories = client.get("/api/archive/categories").json()
        assert len(categories) == 13
        assert {"key", "slug", "label", "fields", "subTypeField", "subTypeValues"} <= set(categories[0])


class TestSubTypePage:
    """GET /api/archive/{category}/{subType}"""

    def test_only_matching_items(self, client, insert_item):
        insert_item(category="transport", transportType="bus", title="Bus Stand", slug="bus-stand",
                    bodyContent=[{"type": "paragraph", "content": "long", "order": 0}])
        insert_item(category="transport", transportType="train", title="Station", slug="station")

        body = client.get("/api/archive/transport/bus").json()

        assert body["title"] == "bus Transport"
        assert body["subType"] == "bus"
        assert [item["slug"] for item in body["items"]] == ["bus-stand"]
        assert "bodyContent" not in body["items"][0]


class TestEntry:
    """GET /api/entry/{slug}"""

    def test_entry_is_normalized_and_ordered(self, client, insert_item, create_user):
        author = create_user(username="historian", role="admin")
        insert_item(
            slug="old-bridge",
            title="The Old Chilahati Bridge",
            author=author["_id"],
            thumbnail="https://drive.google.com/file/d/THUMB/view",
            bodyContent=[
                {"type": "video", "content": "https://youtu.be/vid42", "order": 5},
                {"type": "heading", "content": "History", "order": 0},
                {"type": "image", "content": json.dumps({"url": "https://drive.google.com/open?id=IMG", "caption": "1950"}), "order": 2},
            ],
        )

        body = client.get("/api/entry/old-bridge").json()

        assert body["author"]["username"] == "historian"
        assert body["thumbnail"] == "https://lh3.googleusercontent.com/d/THUMB"
        assert [block["type"] for block in body["bodyContent"]] == ["heading", "image", "video"]
        assert json.loads(body["bodyContent"][1]["content"])["url"] == "https://lh3.googleusercontent.com/d/IMG"
        assert body["bodyContent"][2]["content"] == "https://www.youtube.com/embed/vid42"

    def test_missing_entry(self, client):
        response = client.get("/api/entry/nothing-here")
        assert response.status_code == 404
        assert response.json()["detail"] == "Archive entry not found"


class TestSearch:
    """GET /api/search"""

    def test_empty_query(self, client):
        assert client.get("/api/search?q=").json() == {
            "results": [], "query": "", "currentPage": 1, "totalPages": 0, "totalResults": 0,
        }

    def test_prefix_match_ranks_first(self, client, insert_item):
        insert_item(title="The Old Chilahati Bridge", slug="bridge")
        insert_item(title="Chilahati School", slug="school")
        insert_item(title="Railway Museum", slug="museum", tags=["chilahati"])

        body = client.get("/api/search?q=chilahati").json()

        assert [item["slug"] for item in body["results"]] == ["school", "bridge", "museum"]
        assert body["totalResults"] == 3
        assert body["query"] == "chilahati"

    def test_matches_text_blocks_and_category_fields(self, client, insert_item):
        insert_item(slug="quote-hit", bodyContent=[{"type": "quote", "content": "We crossed the border", "order": 0}])
        insert_item(slug="image-only", bodyContent=[{"type": "image", "content": "https://example.com/border.jpg", "order": 0}])
        insert_item(slug="field-hit", category="Heartbreaking stories", involvedParties=["Border guards"])

        slugs = {item["slug"] for item in client.get("/api/search?q=border").json()["results"]}

        assert slugs == {"quote-hit", "field-hit"}

    def test_pagination_after_ranking(self, client, insert_item):
        for index in range(12):
            insert_item(title=f"Festival {index}", slug=f"festival-{index}")

        second = client.get("/api/search?q=festival&page=2").json()

        assert second["currentPage"] == 2
        assert second["totalPages"] == 2
        assert second["totalResults"] == 12
        assert len(second["results"]) == 2

    def test_regex_characters_are_literal(self, client, insert_item):
        insert_item(title="C++ Club", slug="cpp-club")
        response = client.get("/api/search?q=c%2B%2B")
        assert response.status_code == 200
        assert [item["slug"] for item in response.json()["results"]] == ["cpp-club"]
