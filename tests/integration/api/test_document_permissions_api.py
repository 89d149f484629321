"""
Integration Tests for Document Access Grants
Granting, changing and revoking per-document permissions
"""

import pytest
from httpx import AsyncClient


async def grant(client: AsyncClient, headers, document_id, user_id, level):
    return await client.post(
        f"/api/documents/{document_id}/permissions",
        headers=headers,
        json={"user_id": str(user_id), "permission_type": level},
    )


@pytest.mark.integration
class TestGrantLifecycle:

    @pytest.mark.asyncio
    async def test_grant_then_update(self, client: AsyncClient, editor, viewer, upload_document):
        _, headers = editor
        grantee, _ = viewer
        doc = (await upload_document(headers)).json()["data"]["document"]

        response = await grant(client, headers, doc["id"], grantee.id, "read")
        assert response.status_code == 201
        created = response.json()["data"]
        assert created["permission_type"] == "read"
        assert created["user_email"] == grantee.email
        assert created["user_name"] == grantee.full_name

        response = await grant(client, headers, doc["id"], grantee.id, "write")
        assert response.status_code == 200
        assert response.json()["message"] == "Permission updated successfully"
        assert response.json()["data"]["id"] == created["id"]

        listing = (await client.get(f"/api/documents/{doc['id']}/permissions", headers=headers)).json()["data"]
        assert len(listing) == 1
        assert listing[0]["permission_type"] == "write"

    @pytest.mark.asyncio
    async def test_revoke(self, client: AsyncClient, editor, viewer, upload_document):
        _, headers = editor
        grantee, grantee_headers = viewer
        doc = (await upload_document(headers)).json()["data"]["document"]
        permission = (await grant(client, headers, doc["id"], grantee.id, "read")).json()["data"]

        assert (await client.get(f"/api/documents/{doc['id']}", headers=grantee_headers)).status_code == 200

        response = await client.delete(
            f"/api/documents/{doc['id']}/permissions/{permission['id']}", headers=headers
        )
        assert response.status_code == 200

        assert (await client.get(f"/api/documents/{doc['id']}", headers=grantee_headers)).status_code == 403

        response = await client.delete(
            f"/api/documents/{doc['id']}/permissions/{permission['id']}", headers=headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_grant_to_creator_rejected(self, client: AsyncClient, editor, upload_document):
        owner, headers = editor
        doc = (await upload_document(headers)).json()["data"]["document"]

        response = await grant(client, headers, doc["id"], owner.id, "read")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_grant_to_unknown_user(self, client: AsyncClient, editor, upload_document):
        _, headers = editor
        doc = (await upload_document(headers)).json()["data"]["document"]

        response = await grant(client, headers, doc["id"], "00000000-0000-0000-0000-000000000000", "read")
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_invalid_level(self, client: AsyncClient, editor, viewer, upload_document):
        _, headers = editor
        grantee, _ = viewer
        doc = (await upload_document(headers)).json()["data"]["document"]

        response = await grant(client, headers, doc["id"], grantee.id, "owner")
        assert response.status_code == 422


@pytest.mark.integration
class TestGrantLevels:

    @pytest.mark.asyncio
    async def test_levels_are_ordered(self, client: AsyncClient, editor, make_user, upload_document):
        _, owner_headers = editor
        doc = (await upload_document(owner_headers)).json()["data"]["document"]
        doc_id = doc["id"]

        reader, reader_headers = await make_user("viewer")
        writer, writer_headers = await make_user("viewer")
        manager, manager_headers = await make_user("viewer")
        await grant(client, owner_headers, doc_id, reader.id, "read")
        await grant(client, owner_headers, doc_id, writer.id, "write")
        await grant(client, owner_headers, doc_id, manager.id, "admin")

        update = {"description": "Edited"}
        assert (await client.put(f"/api/documents/{doc_id}", headers=reader_headers, json=update)).status_code == 403
        assert (await client.put(f"/api/documents/{doc_id}", headers=writer_headers, json=update)).status_code == 200
        assert (await client.put(f"/api/documents/{doc_id}", headers=manager_headers, json=update)).status_code == 200

        assert (await client.get(f"/api/documents/{doc_id}/permissions", headers=writer_headers)).status_code == 403
        assert (await client.get(f"/api/documents/{doc_id}/permissions", headers=manager_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_granted_documents_are_listed(self, client: AsyncClient, editor, viewer, upload_document):
        _, owner_headers = editor
        grantee, grantee_headers = viewer
        doc = (await upload_document(owner_headers, title="Shared")).json()["data"]["document"]
        await upload_document(owner_headers, title="Private")

        await grant(client, owner_headers, doc["id"], grantee.id, "read")

        listing = (await client.get("/api/documents", headers=grantee_headers)).json()["data"]
        assert [d["title"] for d in listing["documents"]] == ["Shared"]

    @pytest.mark.asyncio
    async def test_global_admin_manages_grants(self, client: AsyncClient, editor, admin, viewer, upload_document):
        _, owner_headers = editor
        _, admin_headers = admin
        grantee, _ = viewer
        doc = (await upload_document(owner_headers)).json()["data"]["document"]

        response = await grant(client, admin_headers, doc["id"], grantee.id, "read")
        assert response.status_code == 201
