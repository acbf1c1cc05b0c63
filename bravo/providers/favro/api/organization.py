"""
OrganizationAPI / UserAPI

API:
- GET /organizations (不发送 organizationId 头)
- GET /organizations/{organizationId}
- GET /users
"""

import logging
from typing import Optional

from bravo.core.hydrator import EntityPager
from bravo.core.request import RequestOptions
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoOrganization, BravoUser

logger = logging.getLogger(__name__)


class OrganizationAPI(FavroAPI):
    async def list(self) -> EntityPager[BravoOrganization]:
        """当前用户可访问的所有组织（不需要、也不发送 organizationId）"""
        return await self._request_entities(
            "organizations",
            BravoOrganization,
            RequestOptions(exclude_organization_id=True),
        )

    async def get(self, organization_id: str) -> Optional[BravoOrganization]:
        response = await self.client.request(
            f"organizations/{organization_id}",
            RequestOptions(exclude_organization_id=True, tolerated_statuses=(404,)),
        )
        if response.status_code == 404:
            return None
        return await EntityPager(self.client, BravoOrganization, response).get_first_entity()


class UserAPI(FavroAPI):
    async def list(self) -> EntityPager[BravoUser]:
        """当前组织的成员（包含姓名与邮箱）"""
        return await self._request_entities("users", BravoUser)
