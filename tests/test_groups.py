from decimal import Decimal

from evensplit.core.config import settings

from conftest import add_member, make_expense, make_group, register


class TestGroups:

    async def test_creator_becomes_admin(self, client):
        alice = await register(client, "Alice")
        group = await make_group(client, alice, "Flat")

        resp = await client.get("/api/v1/groups/my-groups", headers=alice["headers"])
        assert [(g["id"], g["role"]) for g in resp.json()] == [(group["id"], "admin")]

        resp = await client.get(f"/api/v1/groups/by-uuid/{group['uuid']}", headers=alice["headers"])
        assert resp.json()["id"] == group["id"]

    async def test_details_list_members(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)

        resp = await client.get(f"/api/v1/groups/{group['id']}", headers=bob["headers"])
        assert resp.status_code == 200
        members = {m["user_id"]: m["role"] for m in resp.json()["members"]}
        assert members == {alice["id"]: "admin", bob["id"]: "member"}

    async def test_outsider_gets_403(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)

        resp = await client.get(f"/api/v1/groups/{group['id']}", headers=bob["headers"])
        assert resp.status_code == 403
        assert resp.json()["detail"] == "You are not a member of this group"

    async def test_missing_group(self, client):
        alice = await register(client, "Alice")
        assert (await client.get("/api/v1/groups/404", headers=alice["headers"])).status_code == 404

    async def test_only_admin_edits(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)

        url = f"/api/v1/groups/{group['id']}"
        assert (await client.patch(url, json={"name": "Bob's"}, headers=bob["headers"])).status_code == 403

        resp = await client.patch(url, json={"name": "Renamed"}, headers=alice["headers"])
        assert resp.json()["name"] == "Renamed"

    async def test_member_can_leave_but_not_kick(self, client):
        alice, bob, carol = [await register(client, n) for n in ("Alice", "Bob", "Carol")]
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)
        await add_member(client, alice, group["id"], carol)

        resp = await client.delete(f"/api/v1/groups/{group['id']}/members/{carol['id']}", headers=bob["headers"])
        assert resp.status_code == 403

        resp = await client.delete(f"/api/v1/groups/{group['id']}/members/{bob['id']}", headers=bob["headers"])
        assert resp.json()["message"] == "Left group successfully!"

    async def test_promote_and_demote(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)
        base = f"/api/v1/groups/{group['id']}/members"

        resp = await client.post(f"{base}/{alice['id']}/demote", headers=alice["headers"])
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cannot demote yourself as the only admin"

        assert (await client.post(f"{base}/{bob['id']}/promote", headers=alice["headers"])).status_code == 200
        assert (await client.post(f"{base}/{alice['id']}/demote", headers=alice["headers"])).status_code == 200

    async def test_delete_group_removes_expenses(self, client):
        alice = await register(client, "Alice")
        group = await make_group(client, alice)
        expense = (await make_expense(client, alice, group_id=group["id"])).json()

        resp = await client.delete(f"/api/v1/groups/{group['id']}", headers=alice["headers"])
        assert resp.json()["success"] is True

        resp = await client.get(f"/api/v1/expenses/{expense['id']}", headers=alice["headers"])
        assert resp.status_code == 404


class TestInvitations:

    async def test_invite_and_accept(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice, "Ski trip")

        resp = await client.post(
            f"/api/v1/groups/{group['id']}/invitations/by-email",
            json={"email": "bob@example.com", "message": "join us"},
            headers=alice["headers"],
        )
        assert resp.status_code == 201, resp.text

        pending = (await client.get("/api/v1/groups/invitations", headers=bob["headers"])).json()
        assert [(i["group_name"], i["status"]) for i in pending] == [("Ski trip", "pending")]

        resp = await client.post(
            f"/api/v1/groups/invitations/{pending[0]['id']}/respond",
            json={"response": "accepted"},
            headers=bob["headers"],
        )
        assert resp.json()["success"] is True

        groups = (await client.get("/api/v1/groups/my-groups", headers=bob["headers"])).json()
        assert [(g["id"], g["role"]) for g in groups] == [(group["id"], "member")]

    async def test_duplicate_pending_invitation(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        url = f"/api/v1/groups/{group['id']}/invitations"

        assert (await client.post(url, json={"invited_user_id": bob["id"]}, headers=alice["headers"])).status_code == 201
        resp = await client.post(url, json={"invited_user_id": bob["id"]}, headers=alice["headers"])
        assert resp.status_code == 400

    async def test_only_admins_invite(self, client):
        alice, bob, carol = [await register(client, n) for n in ("Alice", "Bob", "Carol")]
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)

        resp = await client.post(
            f"/api/v1/groups/{group['id']}/invitations", json={"invited_user_id": carol["id"]}, headers=bob["headers"]
        )
        assert resp.status_code == 403

    async def test_expired_invitation(self, client, monkeypatch):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)

        monkeypatch.setattr(settings, "INVITATION_EXPIRY_DAYS", -1)
        invite = (await client.post(
            f"/api/v1/groups/{group['id']}/invitations", json={"invited_user_id": bob["id"]}, headers=alice["headers"]
        )).json()

        resp = await client.post(
            f"/api/v1/groups/invitations/{invite['id']}/respond", json={"response": "accepted"}, headers=bob["headers"]
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "This invitation has expired"

        listed = (await client.get(f"/api/v1/groups/{group['id']}/invitations", headers=alice["headers"])).json()
        assert listed[0]["status"] == "expired"

    async def test_cancel(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        invite = (await client.post(
            f"/api/v1/groups/{group['id']}/invitations", json={"invited_user_id": bob["id"]}, headers=alice["headers"]
        )).json()

        assert (await client.delete(f"/api/v1/groups/invitations/{invite['id']}", headers=bob["headers"])).status_code == 403
        assert (await client.delete(f"/api/v1/groups/invitations/{invite['id']}", headers=alice["headers"])).status_code == 200
        assert (await client.get("/api/v1/groups/invitations", headers=bob["headers"])).json() == []


class TestGroupBalances:

    async def test_settlement_plan(self, client):
        alice, bob, carol = [await register(client, n) for n in ("Alice", "Bob", "Carol")]
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)
        await add_member(client, alice, group["id"], carol)

        await make_expense(client, alice, amount="90.00", group_id=group["id"])
        await make_expense(client, bob, amount="30.00", group_id=group["id"])

        resp = await client.get(f"/api/v1/groups/{group['id']}/balances", headers=carol["headers"])
        assert resp.status_code == 200
        data = resp.json()

        net = {int(k): Decimal(v) for k, v in data["net"].items()}
        assert net == {alice["id"]: Decimal("50.00"), bob["id"]: Decimal("-10.00"), carol["id"]: Decimal("-40.00")}

        assert [(t["from_name"], t["to_name"], t["amount"]) for t in data["settlements"]] == [
            ("Bob", "Alice", "10.00"),
            ("Carol", "Alice", "40.00"),
        ]

    async def test_settled_group(self, client):
        alice = await register(client, "Alice")
        group = await make_group(client, alice)
        await make_expense(client, alice, group_id=group["id"])

        data = (await client.get(f"/api/v1/groups/{group['id']}/balances", headers=alice["headers"])).json()
        assert data == {"net": {}, "settlements": []}

    async def test_one_cent_balance_counts_as_settled(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        group = await make_group(client, alice)
        await add_member(client, alice, group["id"], bob)
        await make_expense(client, alice, amount="0.02", group_id=group["id"])

        data = (await client.get(f"/api/v1/groups/{group['id']}/balances", headers=alice["headers"])).json()
        assert data == {"net": {}, "settlements": []}

    async def test_my_balance(self, client):
        alice, bob = await register(client, "Alice"), await register(client, "Bob")
        await make_expense(client, alice, amount="40.00", splits=[{"user_id": alice["id"]}, {"user_id": bob["id"]}])

        data = (await client.get("/api/v1/balances/me", headers=bob["headers"])).json()
        assert Decimal(data["net_balance"]) == Decimal("-20.00")
        assert [(t["to_id"], t["amount"]) for t in data["you_owe"]] == [(alice["id"], "20.00")]
        assert data["owed_to_you"] == []
