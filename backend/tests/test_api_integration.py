"""Integration tests for the forms and exports API."""

import importlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sbe_earthing.auth import JWTService


SECRET = "integration-secret-key-at-least-32-chars"

VALID_CONTACT = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9876543210",
    "subject": "Earthing quote",
    "message": "Need a quote for 20 copper electrodes.",
    "type": "quote_request",
}

VALID_FAQ = {
    "question": "How deep should an electrode go?",
    "answer": "At least 2.5 metres in most soils.",
    "category": "Installation",
    "order": 1,
}

VALID_PRODUCT = {
    "name": "Copper Bonded Earth Rod",
    "slug": "copper-bonded-earth-rod",
    "category": "Copper Earthing Electrodes",
    "shortDescription": "Copper bonded rod for reliable grounding",
    "description": "Pure copper coating over a steel core.",
    "isFeatured": "false",
    "variants": [
        {"name": "14.2mm x 3000mm", "price": "850", "stock": "25", "sku": "CBR-142-3000"},
        {"name": "14.2mm x 4500mm", "price": 1200, "stock": 12, "isActive": "true"},
    ],
}


def _prepare_env(monkeypatch, tmp_path, disable_auth: bool) -> None:
    # Always use a per-test SQLite DB regardless of DATABASE_URL in the environment
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SBE_METADATA_PATH", raising=False)
    monkeypatch.setenv("SBE_DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("SBE_SECRET_KEY", SECRET)
    if disable_auth:
        monkeypatch.setenv("SBE_DISABLE_AUTH", "1")
    else:
        monkeypatch.delenv("SBE_DISABLE_AUTH", raising=False)

    # Change to backend directory so metadata can be found
    monkeypatch.chdir(Path(__file__).parent.parent)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client with a fresh database and the admin gate disabled."""
    _prepare_env(monkeypatch, tmp_path, disable_auth=True)

    from sbe_earthing.api.app import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def secured_client(tmp_path, monkeypatch):
    """Test client with the admin gate enabled."""
    _prepare_env(monkeypatch, tmp_path, disable_auth=False)

    from sbe_earthing.api.app import app

    with TestClient(app) as client:
        yield client


def bearer(role: str = "admin") -> dict[str, str]:
    token = JWTService(SECRET).generate_access_token("ops@sbeearthing.com", role=role)
    return {"Authorization": f"Bearer {token}"}


def submit(client, slug: str, data: dict):
    return client.post(f"/api/forms/{slug}/submit", json={"data": data})


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "forms": 5, "store": True}


class TestFormMetadata:
    def test_list_forms(self, client):
        response = client.get("/api/forms")
        assert response.status_code == 200
        slugs = {f["slug"] for f in response.json()["forms"]}
        assert slugs == {"admin-login", "contact", "enquiry", "faq", "product"}

    def test_get_form_includes_initial_view(self, client):
        response = client.get("/api/forms/contact")
        assert response.status_code == 200
        data = response.json()

        assert data["collection"] == "contacts"
        assert data["initialData"]["type"] == ""
        view = {v["name"]: v for v in data["view"]}
        assert view["message"]["component"] == "textarea"
        assert view["message"]["rows"] == 5
        assert view["type"]["component"] == "select"
        assert all(v["state"] == "default" for v in data["view"])

    def test_unknown_form(self, client):
        response = client.get("/api/forms/newsletter")
        assert response.status_code == 404


class TestValidateEndpoint:
    def test_reports_every_failing_field(self, client):
        response = client.post("/api/forms/contact/validate", json={"data": {}})
        assert response.status_code == 200
        body = response.json()
        assert body["isValid"] is False
        assert body["errors"]["name"] == "Name is required"
        assert body["errors"]["email"] == "Email is required"
        assert "type" not in body["errors"]

    def test_valid_payload(self, client):
        response = client.post("/api/forms/contact/validate", json={"data": VALID_CONTACT})
        assert response.json() == {"isValid": True, "errors": {}}

    def test_login_shape_check(self, client):
        response = client.post(
            "/api/forms/admin-login/validate",
            json={"data": {"email": "admin@sbeearthing.com", "password": "weak"}},
        )
        assert response.json()["errors"] == {
            "password": "Password must be at least 8 characters"
        }


class TestSubmitEndpoint:
    def test_valid_contact_is_stored(self, client):
        response = submit(client, "contact", VALID_CONTACT)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"].startswith("Thank you for your message")
        assert body["data"]["id"]
        assert body["data"]["submittedAt"]

        exported = client.get("/api/exports/contacts?format=json").json()
        assert len(exported) == 1
        record = exported[0]
        assert record["id"] == body["data"]["id"]
        assert record["name"] == "Asha Rao"
        assert record["status"] == "new"
        assert record["priority"] == "medium"
        assert record["source"] == "website"
        assert record["ipAddress"] == "testclient"

    def test_blank_optional_field_uses_default(self, client):
        data = {k: v for k, v in VALID_CONTACT.items() if k != "type"}
        assert submit(client, "contact", data).status_code == 201

        record = client.get("/api/exports/contacts?format=json").json()[0]
        assert record["type"] == "general"

    def test_undeclared_fields_are_dropped(self, client):
        assert submit(client, "contact", {**VALID_CONTACT, "status": "closed"}).status_code == 201

        record = client.get("/api/exports/contacts?format=json").json()[0]
        assert record["status"] == "new"

    def test_invalid_submission(self, client):
        response = submit(client, "contact", {**VALID_CONTACT, "email": "asha@example"})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["errors"] == {"email": "Email must be a valid email address"}

        assert client.get("/api/exports/contacts?format=json").json() == []

    def test_enquiry_defaults(self, client):
        response = submit(
            client,
            "enquiry",
            {
                "name": "Ravi Kumar",
                "email": "ravi@example.com",
                "phone": "+91 98765-43210",
                "enquiryType": "Bulk Orders",
                "subject": "500 copper rods",
                "message": "Please share bulk pricing for copper rods.",
            },
        )
        assert response.status_code == 201

        record = client.get("/api/exports/enquiries?format=json").json()[0]
        assert record["status"] == "New"
        assert record["source"] == "Website"

    def test_validation_only_form_rejects_submit(self, client):
        response = submit(
            client, "admin-login", {"email": "admin@sbeearthing.com", "password": "Secret123"}
        )
        assert response.status_code == 405

    def test_store_failure_returns_500(self, client, monkeypatch):
        app_module = importlib.import_module("sbe_earthing.api.app")

        def broken_insert(collection, document):
            raise RuntimeError("disk full")

        monkeypatch.setattr(app_module.store, "insert", broken_insert)

        response = submit(client, "contact", VALID_CONTACT)
        assert response.status_code == 500

    def test_admin_form_open_when_auth_disabled(self, client):
        response = submit(
            client,
            "faq",
            {
                "question": "How deep should an electrode go?",
                "answer": "At least 2.5 metres in most soils.",
                "category": "Installation",
                "order": 1,
            },
        )
        assert response.status_code == 201

        record = client.get("/api/exports/faqs?format=json").json()[0]
        assert record["helpful"] == {"yes": 0, "no": 0}
        assert "ipAddress" not in record

    @pytest.mark.parametrize("order", ["abc", "-abc", "nan"])
    def test_number_field_rejects_text(self, client, order):
        response = submit(client, "faq", {**VALID_FAQ, "order": order})
        assert response.status_code == 422
        assert response.json()["errors"] == {"order": "Order must be a number"}

        assert client.get("/api/exports/faqs?format=json").json() == []

    def test_number_field_parses_text(self, client):
        assert submit(client, "faq", {**VALID_FAQ, "order": "4"}).status_code == 201

        record = client.get("/api/exports/faqs?format=json").json()[0]
        assert record["order"] == 4


class TestProductVariants:
    def test_variants_flow_into_export(self, client):
        response = submit(client, "product", VALID_PRODUCT)
        assert response.status_code == 201

        record = client.get("/api/exports/products?format=json").json()[0]
        assert record["isFeatured"] is False
        assert record["variants"][0] == {
            "name": "14.2mm x 3000mm",
            "price": 850,
            "stock": 25,
            "sku": "CBR-142-3000",
        }
        assert record["variants"][1]["isActive"] is True

        row = client.get("/api/exports/products").text.split("\n")[1]
        assert row.startswith(
            "Copper Bonded Earth Rod,Copper Earthing Electrodes,Active,No,2,37,₹850 - ₹1200,"
        )

    def test_variants_are_required(self, client):
        response = submit(client, "product", {**VALID_PRODUCT, "variants": []})
        assert response.status_code == 422
        assert response.json()["errors"] == {"variants": "Variants is required"}

    def test_variant_price_checked(self, client):
        variants = [{"name": "14.2mm x 3000mm", "price": -5, "stock": 1}]
        response = submit(client, "product", {**VALID_PRODUCT, "variants": variants})
        assert response.status_code == 422
        assert response.json()["errors"] == {
            "variants": "Variants entry 1: Price must be at least 0"
        }

    def test_variant_stock_must_be_number(self, client):
        variants = [{"name": "14.2mm x 3000mm", "price": 850, "stock": "plenty"}]
        response = submit(client, "product", {**VALID_PRODUCT, "variants": variants})
        assert response.json()["errors"] == {
            "variants": "Variants entry 1: Stock must be a number"
        }

    def test_checkbox_string_values(self, client):
        response = submit(client, "product", {**VALID_PRODUCT, "isFeatured": "true"})
        assert response.status_code == 201
        record = client.get("/api/exports/products?format=json").json()[0]
        assert record["isFeatured"] is True

    def test_checkbox_rejects_other_text(self, client):
        response = submit(client, "product", {**VALID_PRODUCT, "isFeatured": "maybe"})
        assert response.status_code == 422
        assert response.json()["errors"] == {"isFeatured": "Is featured must be true or false"}


class TestExportEndpoint:
    def test_csv_download(self, client):
        submit(client, "contact", VALID_CONTACT)

        response = client.get("/api/exports/contacts")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="contacts_')
        assert disposition.endswith('.csv"')

        lines = response.text.split("\n")
        assert lines[0].startswith("Name,Email,Phone,Subject,Category")
        assert lines[1].startswith("Asha Rao,asha@example.com,9876543210")

    def test_query_filters(self, client):
        submit(client, "contact", VALID_CONTACT)

        response = client.get("/api/exports/contacts?status=closed")
        assert response.text.count("\n") == 0

        response = client.get("/api/exports/contacts?status=all")
        assert response.text.count("\n") == 1

    def test_tsv_download(self, client):
        response = client.get("/api/exports/faqs?format=xlsx")
        assert response.headers["content-disposition"].endswith('.tsv"')
        assert response.text.startswith("Question\tAnswer\t")

    def test_summary(self, client):
        submit(client, "contact", VALID_CONTACT)
        response = client.get("/api/exports/summary")
        assert response.status_code == 200
        assert "Contacts,1" in response.text.split("\n")

    def test_analytics(self, client):
        submit(client, "contact", VALID_CONTACT)
        response = client.get("/api/exports/analytics")
        lines = response.text.split("\n")
        assert lines[2] == "Total Contacts,1,N/A"

        detailed = client.get("/api/exports/analytics?kind=detailed").json()
        assert detailed["contactsByType"] == {"quote_request": 1}
        assert detailed["monthlyQueries"] == 1

    def test_unknown_dataset(self, client):
        assert client.get("/api/exports/orders").status_code == 404

    def test_bad_format(self, client):
        response = client.get("/api/exports/contacts?format=pdf")
        assert response.status_code == 400
        assert "Unsupported export format" in response.json()["detail"]

    def test_bad_date_range(self, client):
        response = client.get("/api/exports/contacts?start=yesterday")
        assert response.status_code == 400


class TestAdminGate:
    def test_export_requires_token(self, secured_client):
        response = secured_client.get("/api/exports/contacts")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_export_with_admin_token(self, secured_client):
        response = secured_client.get("/api/exports/contacts", headers=bearer())
        assert response.status_code == 200

    def test_export_with_other_role(self, secured_client):
        response = secured_client.get("/api/exports/contacts", headers=bearer("viewer"))
        assert response.status_code == 403

    def test_invalid_token(self, secured_client):
        response = secured_client.get(
            "/api/exports/contacts", headers={"Authorization": "Bearer nonsense"}
        )
        assert response.status_code == 401

    def test_admin_form_requires_token(self, secured_client):
        assert secured_client.get("/api/forms/product").status_code == 401
        assert secured_client.get("/api/forms/product", headers=bearer()).status_code == 200

    def test_public_forms_stay_open(self, secured_client):
        assert submit(secured_client, "contact", VALID_CONTACT).status_code == 201
        assert secured_client.get("/api/health").status_code == 200
