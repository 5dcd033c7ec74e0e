"""
Content management tests

Blog posts, property listings, hero slides and site copy.
"""

from premier_realty.domain.blog.service import estimate_read_time
from premier_realty.domain.properties.service import parse_amenities
from premier_realty.models import BlogPost, Property


def create_post(client, headers, **overrides):
    payload = {
        "title": "Buying in Istanbul: 2025 Guide",
        "content": "<p>Everything you need to know.</p>",
        "status": "published",
    }
    payload.update(overrides)
    return client.post("/admin/blog", json=payload, headers=headers)


def listing(**overrides):
    payload = {
        "title": "Sea view flat",
        "description": "Bright 3+1 close to the ferry",
        "price": 250000,
        "type": "sale",
        "location": "Kadıköy, Istanbul",
        "images": ["https://cdn.example.com/a.jpg"],
    }
    payload.update(overrides)
    return payload


def add_property(db, **overrides):
    values = {
        "title": "Flat",
        "description": "Nice",
        "price": 100000,
        "type": "sale",
        "status": "active",
        "location": "Istanbul",
        "images": ["https://cdn.example.com/x.jpg"],
    }
    values.update(overrides)
    prop = Property(**values)
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


class TestBlogAdmin:
    def test_slug_from_title(self, client, admin_headers):
        response = create_post(client, admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "buying-in-istanbul-2025-guide"
        assert data["publishedAt"] is not None

    def test_duplicate_slug_conflicts(self, client, admin_headers):
        create_post(client, admin_headers)
        response = create_post(client, admin_headers, title="Other", slug="Buying in Istanbul 2025 Guide")
        assert response.status_code == 409

    def test_title_without_slug_characters(self, client, admin_headers):
        response = create_post(client, admin_headers, title="!!!")
        assert response.status_code == 400

    def test_content_is_sanitized(self, client, admin_headers):
        response = create_post(
            client, admin_headers, content='<p onclick="x()">Hi</p><script>alert(1)</script>'
        )
        content = response.json()["content"]
        assert "<script>" not in content
        assert "onclick" not in content
        assert "<p>Hi</p>" in content

    def test_save_as_draft_wins(self, client, admin_headers):
        data = create_post(client, admin_headers, saveAsDraft=True).json()
        assert data["status"] == "draft"
        assert data["publishedAt"] is None

    def test_publish_date_kept_on_later_edits(self, client, admin_headers):
        post = create_post(client, admin_headers).json()

        updated = client.put(
            f"/admin/blog/{post['id']}", json={"title": "Renamed"}, headers=admin_headers
        ).json()

        assert updated["title"] == "Renamed"
        assert updated["slug"] == post["slug"]
        assert updated["publishedAt"] == post["publishedAt"]

    def test_publishing_a_draft_stamps_date(self, client, admin_headers):
        post = create_post(client, admin_headers, status="draft").json()
        updated = client.put(
            f"/admin/blog/{post['id']}", json={"status": "published"}, headers=admin_headers
        ).json()
        assert updated["publishedAt"] is not None

    def test_invalid_status(self, client, admin_headers):
        assert create_post(client, admin_headers, status="archived").status_code == 422

    def test_delete(self, client, admin_headers, db_session):
        post = create_post(client, admin_headers).json()
        response = client.delete(f"/admin/blog/{post['id']}", headers=admin_headers)
        assert response.json() == {"message": "Post deleted"}
        assert db_session.query(BlogPost).count() == 0

    def test_requires_admin(self, client):
        assert create_post(client, {}).status_code in (401, 403)


class TestBlogPublic:
    def test_only_published_and_featured_first(self, client, admin_headers):
        create_post(client, admin_headers, title="Plain")
        create_post(client, admin_headers, title="Starred", featured=True)
        create_post(client, admin_headers, title="Hidden", status="draft")

        titles = [p["title"] for p in client.get("/blog").json()]
        assert titles == ["Starred", "Plain"]

    def test_detail_with_related(self, client, admin_headers):
        for title in ("One", "Two", "Three", "Four"):
            create_post(client, admin_headers, title=title)
        create_post(client, admin_headers, title="Draft", status="draft")

        data = client.get("/blog/one").json()

        assert data["post"]["title"] == "One"
        assert data["post"]["readTime"] == 1
        related = [p["slug"] for p in data["related"]]
        assert len(related) == 3
        assert "one" not in related
        assert "draft" not in related

    def test_draft_not_public(self, client, admin_headers):
        create_post(client, admin_headers, title="Secret", status="draft")
        assert client.get("/blog/secret").status_code == 404

    def test_read_time(self):
        assert estimate_read_time("") == 1
        assert estimate_read_time("<p>" + "word " * 201 + "</p>") == 2
        assert estimate_read_time("word " * 400) == 2


class TestPropertyAdmin:
    def test_create(self, client, admin_headers):
        response = client.post("/admin/properties", json=listing(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert data["images"] == ["https://cdn.example.com/a.jpg"]

    def test_missing_fields_listed(self, client, admin_headers):
        response = client.post(
            "/admin/properties", json=listing(title="", price=None, images=[]), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields: title, price, images"

    def test_draft_is_inactive(self, client, admin_headers):
        data = client.post("/admin/properties", json=listing(saveAsDraft=True), headers=admin_headers).json()
        assert data["status"] == "inactive"

    def test_incomplete_rooms_dropped_and_empty_lists_cleared(self, client, admin_headers):
        payload = listing(
            rooms=[{"name": "Living room", "area": 32}, {"name": "", "area": 10}, {"name": "Hall", "area": 0}],
            floorPlans=[""],
            amenities=[],
        )
        data = client.post("/admin/properties", json=payload, headers=admin_headers).json()

        assert data["rooms"] == [{"name": "Living room", "area": 32.0}]
        assert data["floorPlans"] is None
        assert data["amenities"] is None

    def test_bad_coordinates(self, client, admin_headers):
        response = client.post("/admin/properties", json=listing(latitude=120), headers=admin_headers)
        assert response.status_code == 422

    def test_status_and_featured(self, client, admin_headers):
        prop = client.post("/admin/properties", json=listing(), headers=admin_headers).json()

        sold = client.patch(f"/admin/properties/{prop['id']}/status", json={"status": "sold"}, headers=admin_headers)
        assert sold.json()["status"] == "sold"

        featured = client.patch(f"/admin/properties/{prop['id']}/featured", headers=admin_headers)
        assert featured.json()["featured"] is True
        again = client.patch(f"/admin/properties/{prop['id']}/featured", headers=admin_headers)
        assert again.json()["featured"] is False

    def test_update_and_delete(self, client, admin_headers):
        prop = client.post("/admin/properties", json=listing(), headers=admin_headers).json()

        updated = client.put(f"/admin/properties/{prop['id']}", json=listing(price=240000), headers=admin_headers)
        assert updated.json()["price"] == 240000

        deleted = client.delete(f"/admin/properties/{prop['id']}", headers=admin_headers)
        assert deleted.json() == {"message": "Property deleted"}
        assert client.get(f"/admin/properties/{prop['id']}", headers=admin_headers).status_code == 404


class TestPropertySearch:
    def test_hides_inactive_and_orders_featured_first(self, client, db_session):
        add_property(db_session, title="Plain")
        add_property(db_session, title="Star", featured=True)
        add_property(db_session, title="Draft", status="inactive")
        add_property(db_session, title="Gone", status="sold")

        data = client.get("/properties").json()

        assert data["total"] == 3
        assert data["items"][0]["title"] == "Star"
        assert "Draft" not in [p["title"] for p in data["items"]]

    def test_filters(self, client, db_session):
        add_property(db_session, title="Small rent", type="rent", price=900, bedrooms=1, area=45)
        add_property(db_session, title="Family", price=400000, bedrooms=3, area=140, furnished=True)
        add_property(db_session, title="Villa", price=2000000, bedrooms=5, area=400, property_type="villa")

        def titles(**params):
            return sorted(p["title"] for p in client.get("/properties", params=params).json()["items"])

        assert titles(type="rent") == ["Small rent"]
        assert titles(bedrooms=3) == ["Family", "Villa"]
        assert titles(minPrice=1000, maxPrice=500000) == ["Family"]
        assert titles(minArea=100, maxArea=200) == ["Family"]
        assert titles(propertyType="villa") == ["Villa"]
        assert titles(furnished="true") == ["Family"]

    def test_amenities_must_all_match(self, client, db_session):
        add_property(db_session, title="Both", amenities=["pool", "gym"])
        add_property(db_session, title="Pool", amenities=["pool"])
        add_property(db_session, title="None")

        data = client.get("/properties", params={"amenities": "pool, gym"}).json()
        assert [p["title"] for p in data["items"]] == ["Both"]

    def test_pagination(self, client, db_session):
        for i in range(5):
            add_property(db_session, title=f"P{i}")

        data = client.get("/properties", params={"page": 3, "per_page": 2}).json()

        assert data["total"] == 5
        assert data["total_pages"] == 3
        assert len(data["items"]) == 1
        assert client.get("/properties", params={"per_page": 100}).status_code == 422

    def test_detail_with_related(self, client, db_session):
        prop = add_property(db_session, title="Main")
        for i in range(8):
            add_property(db_session, title=f"Other {i}")
        add_property(db_session, title="Hidden", status="inactive")

        data = client.get(f"/properties/{prop.id}").json()

        assert data["property"]["title"] == "Main"
        related = [p["title"] for p in data["related"]]
        assert len(related) == 6
        assert "Main" not in related
        assert "Hidden" not in related

    def test_inactive_detail_hidden(self, client, db_session):
        prop = add_property(db_session, status="inactive")
        assert client.get(f"/properties/{prop.id}").status_code == 404

    def test_parse_amenities(self):
        assert parse_amenities("pool, gym,,parking ") == ["pool", "gym", "parking"]
        assert parse_amenities(None) == []


class TestHeroSlides:
    def test_new_slides_append(self, client, admin_headers):
        first = client.post("/admin/hero-slides", json={"image": "https://cdn/1.jpg"}, headers=admin_headers)
        second = client.post("/admin/hero-slides", json={"image": "https://cdn/2.jpg"}, headers=admin_headers)

        assert first.status_code == 201
        assert first.json()["sortOrder"] == 0
        assert second.json()["sortOrder"] == 1

    def test_new_slide_goes_after_reordered_and_deleted_ones(self, client, admin_headers):
        created = [
            client.post("/admin/hero-slides", json={"image": f"https://cdn/{n}.jpg"}, headers=admin_headers)
            for n in range(3)
        ]
        ids = [response.json()["id"] for response in created]
        client.delete(f"/admin/hero-slides/{ids[0]}", headers=admin_headers)
        client.put(f"/admin/hero-slides/{ids[1]}", json={"sortOrder": 10}, headers=admin_headers)

        slide = client.post("/admin/hero-slides", json={"image": "https://cdn/new.jpg"}, headers=admin_headers).json()

        assert slide["sortOrder"] == 11
        images = [s["image"] for s in client.get("/hero-slides").json()]
        assert images[-1] == "https://cdn/new.jpg"

    def test_toggle_hides_from_public(self, client, admin_headers):
        slide = client.post("/admin/hero-slides", json={"image": "https://cdn/1.jpg"}, headers=admin_headers).json()
        client.post("/admin/hero-slides", json={"image": "https://cdn/2.jpg"}, headers=admin_headers)

        toggled = client.patch(f"/admin/hero-slides/{slide['id']}/toggle", headers=admin_headers)

        assert toggled.json()["active"] is False
        assert [s["image"] for s in client.get("/hero-slides").json()] == ["https://cdn/2.jpg"]
        assert len(client.get("/admin/hero-slides", headers=admin_headers).json()) == 2

    def test_partial_update(self, client, admin_headers):
        slide = client.post(
            "/admin/hero-slides", json={"image": "https://cdn/1.jpg", "title": "Find your home"}, headers=admin_headers
        ).json()

        updated = client.put(
            f"/admin/hero-slides/{slide['id']}", json={"subtitle": "In Istanbul"}, headers=admin_headers
        ).json()

        assert updated["title"] == "Find your home"
        assert updated["subtitle"] == "In Istanbul"

    def test_image_required(self, client, admin_headers):
        assert client.post("/admin/hero-slides", json={"image": " "}, headers=admin_headers).status_code == 422

    def test_delete(self, client, admin_headers):
        slide = client.post("/admin/hero-slides", json={"image": "https://cdn/1.jpg"}, headers=admin_headers).json()
        response = client.delete(f"/admin/hero-slides/{slide['id']}", headers=admin_headers)
        assert response.json() == {"message": "Slide deleted"}


class TestSiteContent:
    def test_empty_by_default(self, client):
        assert client.get("/site-content").json() == {"content": {}, "updatedAt": None}

    def test_replace(self, client, admin_headers):
        content = {"about": {"title": "About us"}, "contact": {"phone": "+90 212 000 00 00"}}

        response = client.put("/site-content", json={"content": content}, headers=admin_headers)
        assert response.status_code == 200

        client.put("/site-content", json={"content": {"about": {"title": "Who we are"}}}, headers=admin_headers)
        data = client.get("/site-content").json()
        assert data["content"] == {"about": {"title": "Who we are"}}
        assert data["updatedAt"] is not None

    def test_requires_admin(self, client):
        assert client.put("/site-content", json={"content": {}}).status_code in (401, 403)
