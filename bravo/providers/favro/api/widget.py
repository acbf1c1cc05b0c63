"""
WidgetAPI / ColumnAPI

API:
- GET /widgets?collectionId=
- GET /widgets/{widgetCommonId}
- POST /widgets
- DELETE /widgets/{widgetCommonId}
- GET /columns?widgetCommonId=
- GET /columns/{columnId}
- POST /columns
- DELETE /columns/{columnId}
"""

from typing import Any, Dict, Optional

from bravo.core.hydrator import EntityPager
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoColumn, BravoWidget


class WidgetAPI(FavroAPI):
    async def list(self, collection_id: Optional[str] = None) -> EntityPager[BravoWidget]:
        """按集合筛选可以减少请求次数；不传 collection_id 时返回全组织的 Widget"""
        return await self._request_entities(
            "widgets",
            BravoWidget,
            self._options(query={"collectionId": collection_id}),
        )

    async def get(self, widget_common_id: str) -> Optional[BravoWidget]:
        return await self._get_entity(f"widgets/{widget_common_id}", BravoWidget)

    async def create(
        self,
        collection_id: str,
        name: str,
        type: str = "board",
        color: str = "cyan",
        **extra: Any,
    ) -> BravoWidget:
        body: Dict[str, Any] = {
            "collectionId": collection_id,
            "name": name,
            "type": type,
            "color": color,
            **extra,
        }
        return await self._write_entity("widgets", BravoWidget, "post", body)

    async def delete(self, widget_common_id: str) -> None:
        await self._delete(f"widgets/{widget_common_id}")


class ColumnAPI(FavroAPI):
    async def list(self, widget_common_id: str) -> EntityPager[BravoColumn]:
        return await self._request_entities(
            "columns",
            BravoColumn,
            self._options(query={"widgetCommonId": widget_common_id}),
        )

    async def get(self, column_id: str) -> Optional[BravoColumn]:
        return await self._get_entity(f"columns/{column_id}", BravoColumn)

    async def create(
        self, widget_common_id: str, name: str, position: Optional[int] = None
    ) -> BravoColumn:
        body: Dict[str, Any] = {"widgetCommonId": widget_common_id, "name": name}
        if position is not None:
            body["position"] = position
        return await self._write_entity("columns", BravoColumn, "post", body)

    async def delete(self, column_id: str) -> None:
        await self._delete(f"columns/{column_id}")
