from typing import Any, Callable, List, Optional, Union

from bravo.core.utility import StringOrPattern
from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Organization, OrganizationMember, User


class BravoOrganization(BravoEntity[Organization]):
    """Hydrated Favro Organization."""

    model_class = Organization
    id_field = "organization_id"

    @property
    def organization_id(self) -> str:
        return self._data.organization_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def shared_to_users(self) -> List[OrganizationMember]:
        return list(self._data.shared_to_users)

    async def list_members(self) -> List["BravoUser"]:
        return await self._client.list_members()

    async def find_member(self, match: Callable[["BravoUser"], Any]) -> Optional["BravoUser"]:
        return await self._client.find_member(match)

    async def find_member_by_email(self, email: StringOrPattern) -> "BravoUser":
        return await self._client.find_member_by_email(email)

    async def find_member_by_name(self, name: StringOrPattern) -> "BravoUser":
        return await self._client.find_member_by_name(name)

    async def find_member_by_user_id(self, user_id: str) -> "BravoUser":
        return await self._client.find_member_by_user_id(user_id)


class BravoUser(BravoEntity[User]):
    """A member of the current organization (includes name and email)."""

    model_class = User
    id_field = "user_id"

    @property
    def user_id(self) -> str:
        return self._data.user_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def email(self) -> str:
        return self._data.email

    @property
    def organization_role(self) -> Optional[str]:
        return self._data.organization_role


UserOrId = Union[str, BravoUser]
