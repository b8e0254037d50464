from jobpost.errors import UploadError


def test_checkout_creates_order(client, checkout_form, logo_file, fake_stripe, logo_uploader):
    res = client.post("/api/v1/posts/checkout", data=checkout_form(post_count=2), files=logo_file)

    assert res.status_code == 200
    data = res.json()
    assert data["order"] == {
        "id": "pi_test_1",
        "amount": 1000,
        "currency": "USD",
        "clientSecret": "pi_test_1_secret_abc",
    }
    assert data["gatewayKey"] == "pk_test_123"
    assert data["batch"]["logo"] == logo_uploader.url
    assert data["batch"]["postCount"] == 2
    assert [e["index"] for e in data["entries"]] == [0, 1]
    assert data["entries"][0]["tags"] == ["python", "fastapi"]
    assert len(fake_stripe.created) == 1
    assert logo_uploader.calls[0]["content_type"] == "image/png"

def test_checkout_errors_never_create_order(client, checkout_form, logo_file, fake_stripe):
    form = checkout_form(post_count=2)
    form["email"] = "pas-un-email"
    del form["posts[1].applyLink"]

    res = client.post("/api/v1/posts/checkout", data=form, files=logo_file)

    assert res.status_code == 400
    errors = res.json()["errors"]
    assert set(errors) == {"email", "posts[1].applyEmail"}
    assert fake_stripe.created == []

def test_checkout_without_logo_reports_logo(client, checkout_form, fake_stripe):
    res = client.post("/api/v1/posts/checkout", data=checkout_form(post_count=1), files={"cv": ("cv.txt", b"hello", "text/plain")})

    assert res.status_code == 400
    assert "logo" in res.json()["errors"]
    assert fake_stripe.created == []

def test_checkout_upload_failure_maps_to_other(client, checkout_form, logo_file, logo_uploader, fake_stripe):
    logo_uploader.error = UploadError("Stockage des logos injoignable")

    res = client.post("/api/v1/posts/checkout", data=checkout_form(post_count=1), files=logo_file)

    assert res.status_code == 400
    assert res.json() == {"errors": {"other": "Stockage des logos injoignable"}}
    assert fake_stripe.created == []

def test_checkout_gateway_failure_is_distinct(client, checkout_form, logo_file, fake_stripe):
    fake_stripe.fail_create = True

    res = client.post("/api/v1/posts/checkout", data=checkout_form(post_count=1), files=logo_file)

    assert res.status_code == 502
    body = res.json()
    assert body["kind"] == "gateway"
    assert "errors" not in body

def test_checkout_requires_multipart(client):
    res = client.post("/api/v1/posts/checkout", json={"email": "jobs@acme.com"})
    assert res.status_code == 400
    assert "other" in res.json()["errors"]

def test_checkout_zero_count_reports_post_count(client, checkout_form, logo_file, fake_stripe):
    form = checkout_form(post_count=1)
    form["postCount"] = "abc"

    res = client.post("/api/v1/posts/checkout", data=form, files=logo_file)

    assert res.status_code == 400
    assert list(res.json()["errors"]) == ["postCount"]

def test_pricing_endpoint(client):
    res = client.get("/api/v1/posts/pricing")
    assert res.status_code == 200
    data = res.json()
    assert data["prices"]["USD"] == 500
    assert "EUR" in data["currencies"]
    assert "full-time" in data["jobTypes"]
    assert data["expiryOptions"] == [30, 60, 90]
    assert data["maxPosts"] >= 1

def test_security_headers(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.headers["X-Frame-Options"] == "DENY"
    assert "https://js.stripe.com" in res.headers["Content-Security-Policy"]
