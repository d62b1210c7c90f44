"""Integration tests for asset endpoints.

Storage is the in-memory fake from conftest; its ``fail_create`` and
``fail_delete`` switches drive the failure paths.
"""

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, data: dict) -> str:
    response = await client.post("/api/products", json=data)
    return response.json()["data"]["id"]


async def _upload(client: AsyncClient, product_id: str, name: str = "cover.png", category: str = "cover"):
    return await client.post(
        f"/api/products/{product_id}/assets/upload",
        files={"file": (name, b"\x89PNG fake image", "image/png")},
        data={"category": category},
    )


class TestUpload:
    """Tests for POST /assets/upload."""

    @pytest.mark.asyncio
    async def test_upload_saves_asset(self, client: AsyncClient, sample_product_data: dict, mock_db):
        product_id = await _create(client, sample_product_data)

        response = await _upload(client, product_id)

        assert response.status_code == 200
        asset = response.json()["data"]["asset"]
        assert asset["status"] == "saved"
        assert asset["dbId"] == "db-1"
        assert asset["category"] == "cover"

        checklist = (await client.get(f"/api/products/{product_id}/checklist")).json()["data"]["checklist"]
        assert checklist["assetsReady"] is True

        stored = await mock_db["product_ideas"].find_one({"name": "My Guide"})
        assert [a["dbId"] for a in stored["raw_analysis"]["assets"]] == ["db-1"]

    @pytest.mark.asyncio
    async def test_failed_upload_kept_in_session(
        self, client: AsyncClient, sample_product_data: dict, fake_storage, mock_db
    ):
        fake_storage.fail_create = True
        product_id = await _create(client, sample_product_data)

        response = await _upload(client, product_id)

        assert response.status_code == 200
        body = response.json()["data"]
        assert body["asset"]["status"] == "uploaded"
        assert body["notifications"][0]["title"] == "Upload Failed"

        assets = (await client.get(f"/api/products/{product_id}/assets")).json()["data"]
        assert len(assets) == 1
        stored = await mock_db["product_ideas"].find_one({"name": "My Guide"})
        assert stored["raw_analysis"].get("assets", []) == []

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await _upload(client, product_id, category="poster")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CATEGORY"

    @pytest.mark.asyncio
    async def test_retry_save_after_failure(self, client: AsyncClient, sample_product_data: dict, fake_storage):
        fake_storage.fail_create = True
        product_id = await _create(client, sample_product_data)
        asset_id = (await _upload(client, product_id)).json()["data"]["asset"]["id"]

        fake_storage.fail_create = False
        response = await client.post(f"/api/products/{product_id}/assets/{asset_id}/save")

        assert response.status_code == 200
        assert response.json()["data"]["asset"]["status"] == "saved"


class TestGeneratedImages:
    """Tests for AI image assets."""

    @pytest.mark.asyncio
    async def test_generate_image(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await client.post(
            f"/api/products/{product_id}/assets/generate-image",
            json={"prompt": "a calm desk at sunrise"},
        )

        assert response.status_code == 200
        asset = response.json()["data"]["asset"]
        assert asset["status"] == "uploaded"
        assert asset["category"] == "illustration"
        assert asset["dbId"] is None
        assert "calm" in asset["fullUrl"]

    @pytest.mark.asyncio
    async def test_blank_prompt(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await client.post(
            f"/api/products/{product_id}/assets/generate-image", json={"prompt": "  "}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_save_selected(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)
        ids = []
        for prompt in ("first image", "second image"):
            response = await client.post(
                f"/api/products/{product_id}/assets/generate-image", json={"prompt": prompt}
            )
            ids.append(response.json()["data"]["asset"]["id"])
        for asset_id in ids:
            await client.put(
                f"/api/products/{product_id}/assets/{asset_id}/selected", json={"selected": True}
            )

        response = await client.post(f"/api/products/{product_id}/assets/save-selected")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["saved"] == 2
        assert all(asset["status"] == "saved" for asset in data["assets"])
        assert not any(asset["isSelected"] for asset in data["assets"])

    @pytest.mark.asyncio
    async def test_save_selected_all_fail(self, client: AsyncClient, sample_product_data: dict, fake_storage):
        product_id = await _create(client, sample_product_data)
        response = await client.post(
            f"/api/products/{product_id}/assets/generate-image", json={"prompt": "a map"}
        )
        asset_id = response.json()["data"]["asset"]["id"]
        await client.put(f"/api/products/{product_id}/assets/{asset_id}/selected", json={"selected": True})
        fake_storage.fail_create = True

        response = await client.post(f"/api/products/{product_id}/assets/save-selected")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "ASSET_SAVE_FAILED"


class TestDeleteAsset:
    """Tests for DELETE /assets/{asset_id}."""

    @pytest.mark.asyncio
    async def test_delete_saved_asset(self, client: AsyncClient, sample_product_data: dict, fake_storage):
        product_id = await _create(client, sample_product_data)
        asset_id = (await _upload(client, product_id)).json()["data"]["asset"]["id"]

        response = await client.delete(f"/api/products/{product_id}/assets/{asset_id}")

        assert response.status_code == 200
        assert fake_storage.deleted == ["db-1"]
        assets = (await client.get(f"/api/products/{product_id}/assets")).json()["data"]
        assert assets == []

    @pytest.mark.asyncio
    async def test_delete_failure_keeps_asset(self, client: AsyncClient, sample_product_data: dict, fake_storage):
        product_id = await _create(client, sample_product_data)
        asset_id = (await _upload(client, product_id)).json()["data"]["asset"]["id"]
        fake_storage.fail_delete = True

        response = await client.delete(f"/api/products/{product_id}/assets/{asset_id}")

        assert response.status_code == 502
        assets = (await client.get(f"/api/products/{product_id}/assets")).json()["data"]
        assert [a["id"] for a in assets] == [asset_id]

    @pytest.mark.asyncio
    async def test_delete_unknown_asset(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await client.delete(f"/api/products/{product_id}/assets/nope")

        assert response.status_code == 404


class TestServeContent:
    """Tests for GET /assets/{db_id}/content."""

    @pytest.mark.asyncio
    async def test_serve_uploaded_bytes(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)
        await _upload(client, product_id)

        response = await client.get(f"/api/products/{product_id}/assets/db-1/content")

        assert response.status_code == 200
        assert response.content == b"\x89PNG fake image"
        assert response.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_other_product_cannot_read(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)
        other_id = await _create(client, {**sample_product_data, "name": "Other"})
        await _upload(client, product_id)

        response = await client.get(f"/api/products/{other_id}/assets/db-1/content")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ASSET_NOT_FOUND"
