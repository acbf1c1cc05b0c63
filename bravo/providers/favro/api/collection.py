"""
CollectionAPI

API:
- GET /collections
- GET /collections/{collectionId}
- POST /collections
- DELETE /collections/{collectionId}
"""

import logging
from typing import Any, Dict, Optional

from bravo.core.hydrator import EntityPager
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoCollection

logger = logging.getLogger(__name__)


class CollectionAPI(FavroAPI):
    async def list(self, archived: Optional[bool] = None) -> EntityPager[BravoCollection]:
        return await self._request_entities(
            "collections",
            BravoCollection,
            self._options(query={"archived": archived}),
        )

    async def get(self, collection_id: str) -> Optional[BravoCollection]:
        return await self._get_entity(f"collections/{collection_id}", BravoCollection)

    async def create(
        self,
        name: str,
        public_sharing: str = "organization",
        background: Optional[str] = None,
    ) -> BravoCollection:
        """
        创建集合

        Args:
            name: 集合名称
            public_sharing: 可见范围，默认 organization
            background: 背景颜色
        """
        body: Dict[str, Any] = {"name": name, "publicSharing": public_sharing}
        if background:
            body["background"] = background
        collection = await self._write_entity("collections", BravoCollection, "post", body)
        logger.info("Created collection %s (%s)", collection.name, collection.collection_id)
        return collection

    async def delete(self, collection_id: str) -> None:
        await self._delete(f"collections/{collection_id}")
