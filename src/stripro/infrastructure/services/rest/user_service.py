"""User resource service (REST).

The current user's profile lives under /users/me; mutating it invalidates
every cached read tagged "users".
"""

from typing import Any

from stripro.infrastructure.services.rest.base import RestService


class UserService(RestService):
    """User management and current-user account operations."""

    resource = "users"

    async def list_users(self, params: dict[str, Any] | None = None) -> Any:
        return await self.get(f"/users{self.build_query_string(params)}", self._cached())

    async def get_user(self, user_id: str) -> Any:
        return await self.get(f"/users/{user_id}", self._cached())

    async def create_user(self, payload: dict[str, Any]) -> Any:
        return await self.post("/users", payload)

    async def update_user(self, user_id: str, payload: dict[str, Any]) -> Any:
        return await self.put(f"/users/{user_id}", payload)

    async def delete_user(self, user_id: str) -> None:
        await self.delete(f"/users/{user_id}")

    async def get_current_user(self) -> Any:
        return await self.get("/users/me", self._cached())

    async def update_current_user(self, payload: dict[str, Any]) -> Any:
        return await self.put("/users/me", payload)

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self.post(
            "/users/me/password",
            {"currentPassword": current_password, "newPassword": new_password},
        )

    async def connect_stripe_account(self, stripe_account_id: str) -> Any:
        return await self.post("/users/me/stripe", {"stripeAccountId": stripe_account_id})

    async def disconnect_stripe_account(self) -> Any:
        return await self.delete("/users/me/stripe")

    async def request_data_deletion(self, reason: str | None = None) -> Any:
        """Ask for account data deletion; returns requestId and completion estimate."""
        return await self.post("/users/me/data-deletion", {"reason": reason})
