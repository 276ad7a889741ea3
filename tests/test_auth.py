"""Authentication routes and the guest cart hand-over on login"""


async def _register(client, email="shopper@mail.com", password="secret123", full_name="Sam Shopper"):
    return await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "full_name": full_name},
    )


async def _login(client, email="shopper@mail.com", password="secret123"):
    return await client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestRegister:
    async def test_register(self, client):
        response = await _register(client, email="Shopper@Mail.com")

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "shopper@mail.com"
        assert user["full_name"] == "Sam Shopper"
        assert "password_hash" not in user

    async def test_duplicate_email(self, client):
        await _register(client)

        response = await _register(client)

        assert response.status_code == 409
        assert response.json()["error_code"] == "EMAIL_EXISTS"

    async def test_invalid_email(self, client):
        response = await _register(client, email="not-an-email")

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_EMAIL"

    async def test_short_password(self, client):
        response = await _register(client, password="123")

        assert response.status_code == 400
        assert response.json()["error_code"] == "WEAK_PASSWORD"


class TestLogin:
    async def test_login_and_status(self, client):
        await _register(client)

        response = await _login(client)

        assert response.status_code == 200
        assert response.json()["user"]["last_login"] is not None

        status = (await client.get("/api/v1/auth/status")).json()
        assert status["authenticated"] is True
        assert status["email"] == "shopper@mail.com"

        me = await client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["email"] == "shopper@mail.com"

    async def test_wrong_password(self, client):
        await _register(client)

        response = await _login(client, password="wrong-password")

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"

    async def test_unknown_email(self, client):
        response = await _login(client, email="ghost@mail.com")

        assert response.status_code == 401

    async def test_logout(self, client):
        await _register(client)
        await _login(client)

        response = await client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert (await client.get("/api/v1/auth/status")).json()["authenticated"] is False
        assert (await client.get("/api/v1/auth/me")).status_code == 401

    async def test_login_merges_guest_cart(self, client, make_product):
        product_a = await make_product(name="A")
        product_b = await make_product(name="B")
        await _register(client)

        # Existing user cart: 1 x A
        await _login(client)
        await client.post("/api/v1/cart/add", json={"product_id": product_a, "quantity": 1})
        await client.post("/api/v1/auth/logout")

        # Guest cart: 2 x A, 1 x B
        await client.post("/api/v1/cart/add", json={"product_id": product_a, "quantity": 2})
        await client.post("/api/v1/cart/add", json={"product_id": product_b, "quantity": 1})

        response = await _login(client)

        assert response.json()["cart_merge"] == {"merged": 1, "transferred": 1, "failed": 0}
        cart = (await client.get("/api/v1/cart")).json()
        assert {item["product_id"]: item["quantity"] for item in cart["items"]} == {product_a: 3, product_b: 1}

    async def test_user_cart_survives_logout_and_login(self, client, make_product):
        product = await make_product()
        await _register(client)
        await _login(client)
        await client.post("/api/v1/cart/add", json={"product_id": product, "quantity": 2})
        await client.post("/api/v1/auth/logout")

        assert (await client.get("/api/v1/cart/count")).json()["count"] == 0

        await _login(client)
        assert (await client.get("/api/v1/cart/count")).json()["count"] == 2


class TestProfile:
    async def test_update_profile(self, client):
        await _register(client)
        await _login(client)

        response = await client.put("/api/v1/auth/profile", json={"phone": "555-0199", "address": "1 Elm St"})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["phone"] == "555-0199"
        assert user["address"] == "1 Elm St"
        assert user["full_name"] == "Sam Shopper"

    async def test_change_password(self, client):
        await _register(client)
        await _login(client)

        rejected = await client.put(
            "/api/v1/auth/change-password",
            json={"current_password": "nope", "new_password": "another123"},
        )
        assert rejected.status_code == 400

        changed = await client.put(
            "/api/v1/auth/change-password",
            json={"current_password": "secret123", "new_password": "another123"},
        )
        assert changed.status_code == 200

        await client.post("/api/v1/auth/logout")
        assert (await _login(client, password="secret123")).status_code == 401
        assert (await _login(client, password="another123")).status_code == 200

    async def test_profile_requires_login(self, client):
        response = await client.put("/api/v1/auth/profile", json={"phone": "555"})

        assert response.status_code == 401
