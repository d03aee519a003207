"""
Online Retail API - Product Endpoint Tests
===========================================

What:  End-to-end tests of /products through the real app, middleware and a
       SQLite database created per test.

What we test:
    ✅ Create → Get round trip, 201 on create
    ✅ Duplicate stock_code → 400, original untouched
    ✅ Missing/invalid fields → 400 (not FastAPI's default 422)
    ✅ Update changes only the description; 404/400 paths
    ✅ Delete → 200 confirmation, then 404; deleting twice → 404
    ✅ List limit handling
    ✅ Persistence failures → generic 500
"""

import json

import pytest


async def _create(client, payload):
    response = await client.post("/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _product(index: int) -> dict:
    return {
        "invoice_no": f"5363{index:02d}",
        "stock_code": f"SC{index:03d}",
        "description": f"ITEM {index}",
        "quantity": index + 1,
        "unit_price": 1.25,
        "customer_id": "13047",
        "country": "France",
    }


class TestProductLifecycle:
    """The full create → read → update → delete scenario."""

    @pytest.mark.asyncio
    async def test_full_scenario(self, test_client, sample_product_data):
        payload = {k: v for k, v in sample_product_data.items() if k != "invoice_date"}

        created = await _create(test_client, payload)
        for key, value in payload.items():
            assert created[key] == value

        response = await test_client.get("/products/85123A")
        assert response.status_code == 200
        assert response.json() == created

        response = await test_client.put("/products/85123A", json={"description": "Updated"})
        assert response.status_code == 200
        updated = response.json()
        assert updated["description"] == "Updated"
        assert updated["quantity"] == 6

        response = await test_client.delete("/products/85123A")
        assert response.status_code == 200
        assert response.json()["stock_code"] == "85123A"

        response = await test_client.get("/products/85123A")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestCreateProduct:

    @pytest.mark.asyncio
    async def test_create_with_invoice_date_round_trips(self, test_client, sample_product_data):
        payload = dict(sample_product_data, invoice_date="2010-12-01T08:26:00")

        created = await _create(test_client, payload)
        fetched = (await test_client.get("/products/85123A")).json()

        assert created == payload
        assert fetched == payload

    @pytest.mark.asyncio
    async def test_integer_customer_id_is_stored_as_text(self, test_client, sample_product_data):
        created = await _create(test_client, dict(sample_product_data, customer_id=17850))
        assert created["customer_id"] == "17850"

    @pytest.mark.asyncio
    async def test_optional_fields_may_be_omitted(self, test_client, sample_product_data):
        payload = dict(sample_product_data)
        del payload["country"]
        del payload["invoice_date"]

        created = await _create(test_client, payload)

        assert created["country"] is None
        assert created["invoice_date"] is None

    @pytest.mark.asyncio
    async def test_duplicate_stock_code_rejected(self, test_client, sample_product_data):
        await _create(test_client, sample_product_data)

        duplicate = dict(sample_product_data, description="SOMETHING ELSE", quantity=99)
        response = await test_client.post("/products", json=duplicate)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "conflict"
        assert "already exists" in body["message"]

        original = (await test_client.get("/products/85123A")).json()
        assert original["description"] == sample_product_data["description"]
        assert original["quantity"] == 6

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field",
        ["invoice_no", "stock_code", "description", "quantity", "unit_price", "customer_id"],
    )
    async def test_missing_required_field(self, test_client, sample_product_data, field):
        payload = dict(sample_product_data)
        del payload[field]

        response = await test_client.post("/products", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert any(detail["field"] == field for detail in body["details"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field,value",
        [
            ("quantity", "six"),
            ("quantity", "6"),
            ("quantity", True),
            ("quantity", 6.5),
            ("unit_price", "2.55"),
            ("unit_price", None),
        ],
    )
    async def test_non_numeric_values_rejected(self, test_client, sample_product_data, field, value):
        response = await test_client.post("/products", json=dict(sample_product_data, **{field: value}))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["1e999", "-1e999", "NaN", "Infinity"])
    async def test_non_finite_unit_price_rejected(self, test_client, sample_product_data, token):
        # Python's JSON parser turns these tokens into inf/nan floats
        body = json.dumps(dict(sample_product_data, unit_price="__PRICE__"))
        response = await test_client.post(
            "/products",
            content=body.replace('"__PRICE__"', token).encode(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert (await test_client.get("/products/85123A")).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [2**31, -(2**31) - 1, 2**63])
    async def test_quantity_outside_column_range_rejected(
        self, test_client, sample_product_data, quantity
    ):
        response = await test_client.post(
            "/products", json=dict(sample_product_data, quantity=quantity)
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_quantity_at_column_limits_accepted(self, test_client, sample_product_data):
        created = await _create(test_client, dict(sample_product_data, quantity=2**31 - 1))
        assert created["quantity"] == 2**31 - 1

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            "/products",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestGetProduct:

    @pytest.mark.asyncio
    async def test_unknown_stock_code(self, test_client):
        response = await test_client.get("/products/DOES-NOT-EXIST")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["request_id"]


class TestUpdateProduct:

    @pytest.mark.asyncio
    async def test_update_only_changes_description(self, test_client, sample_product_data):
        payload = dict(sample_product_data, invoice_date="2010-12-01T08:26:00")
        before = await _create(test_client, payload)

        response = await test_client.put(
            "/products/85123A",
            json={"description": "Updated", "quantity": 1000, "unit_price": 0.01, "country": "Spain"},
        )

        assert response.status_code == 200
        after = (await test_client.get("/products/85123A")).json()
        assert after == dict(before, description="Updated")

    @pytest.mark.asyncio
    async def test_update_unknown_stock_code(self, test_client):
        response = await test_client.put("/products/NOPE", json={"description": "Updated"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"description": 42}, {"description": None}])
    async def test_update_requires_string_description(self, test_client, sample_product_data, body):
        await _create(test_client, sample_product_data)

        response = await test_client.put("/products/85123A", json=body)

        assert response.status_code == 400
        unchanged = (await test_client.get("/products/85123A")).json()
        assert unchanged["description"] == sample_product_data["description"]


class TestDeleteProduct:

    @pytest.mark.asyncio
    async def test_delete_returns_confirmation(self, test_client, sample_product_data):
        await _create(test_client, sample_product_data)

        response = await test_client.delete("/products/85123A")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Product '85123A' deleted successfully",
            "stock_code": "85123A",
        }

    @pytest.mark.asyncio
    async def test_delete_unknown_is_404_and_no_op(self, test_client, sample_product_data):
        await _create(test_client, sample_product_data)

        response = await test_client.delete("/products/OTHER")

        assert response.status_code == 404
        assert (await test_client.get("/products/85123A")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client, sample_product_data):
        await _create(test_client, sample_product_data)

        assert (await test_client.delete("/products/85123A")).status_code == 200
        assert (await test_client.delete("/products/85123A")).status_code == 404


class TestListProducts:

    @pytest.mark.asyncio
    async def test_empty_table(self, test_client):
        response = await test_client.get("/products")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_limit_bounds_result_size(self, test_client):
        for i in range(7):
            await _create(test_client, _product(i))

        limited = await test_client.get("/products", params={"limit": 5})
        default = await test_client.get("/products")

        assert limited.status_code == 200
        assert len(limited.json()) == 5
        assert len(default.json()) == 7

    @pytest.mark.asyncio
    async def test_limit_above_cap_is_accepted(self, test_client):
        await _create(test_client, _product(1))

        response = await test_client.get("/products", params={"limit": 5000})

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", ["0", "-3", "many"])
    async def test_invalid_limit(self, test_client, limit):
        response = await test_client.get("/products", params={"limit": limit})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_positive_limit_names_the_parameter(self, test_client):
        response = await test_client.get("/products", params={"limit": 0})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "limit"


class TestPersistenceFailures:
    """Queries against a database without the table fail inside the driver."""

    @pytest.mark.asyncio
    async def test_list_failure_is_generic_500(self, broken_client):
        response = await broken_client.get("/products")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "online_retail_data" not in response.text

    @pytest.mark.asyncio
    async def test_get_failure_is_500(self, broken_client):
        response = await broken_client.get("/products/85123A")
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_create_failure_is_500(self, broken_client, sample_product_data):
        response = await broken_client.post("/products", json=sample_product_data)
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_update_failure_is_500(self, broken_client):
        response = await broken_client.put("/products/85123A", json={"description": "Updated"})

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert "no such table" not in response.text

    @pytest.mark.asyncio
    async def test_delete_failure_is_500(self, broken_client):
        response = await broken_client.delete("/products/85123A")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "An internal error occurred. Please try again later."
