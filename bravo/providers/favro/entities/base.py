"""
BravoEntity - 实体基类

每个实体持有:
- 原始 API 记录的副本（to_json 返回）
- 校验后的不可变 pydantic 模型
- 发出后续请求的客户端引用
"""

import copy
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Generic, Type, TypeVar

from pydantic import ValidationError

from bravo.core.errors import BravoResponseParseError
from bravo.schemas.favro import FavroModel

if TYPE_CHECKING:
    from bravo.providers.favro.bravo_client import BravoClient

ModelT = TypeVar("ModelT", bound=FavroModel)
EntityT = TypeVar("EntityT", bound="BravoEntity")


class BravoEntity(Generic[ModelT]):
    model_class: ClassVar[Type[FavroModel]] = FavroModel
    # 用于 equals() 与 __repr__ 的主键属性名
    id_field: ClassVar[str] = ""

    def __init__(self, client: "BravoClient", data: Dict[str, Any]):
        self._client = client
        self._set_data(data)
        self._deleted = False

    @classmethod
    def hydrate(cls: Type[EntityT], client: Any, record: Any) -> EntityT:
        """
        由原始记录构造实体

        Raises:
            BravoResponseParseError: 记录不符合该实体的结构
        """
        if not isinstance(record, dict):
            raise BravoResponseParseError(
                f"Expected an object for {cls.__name__}, got {type(record).__name__}",
                content=repr(record),
            )
        try:
            return cls(client, record)
        except ValidationError as e:
            raise BravoResponseParseError(
                f"Invalid {cls.__name__} record: {e}", content=repr(record)
            ) from e

    def _set_data(self, data: Dict[str, Any]) -> None:
        self._data: ModelT = self.model_class.model_validate(data)  # type: ignore[assignment]
        self._raw = copy.deepcopy(data)

    def _replace_with(self, other: "BravoEntity") -> None:
        """Adopt another instance's data (after an update or refresh)."""
        self._data = other._data  # type: ignore[assignment]
        self._raw = other.to_json()

    def __repr__(self) -> str:
        name = getattr(self._data, "name", None)
        return f"<{type(self).__name__} {self.id_field}={self.id!r} name={name!r}>"

    @property
    def id(self) -> Any:
        return getattr(self._data, self.id_field, None)

    @property
    def data(self) -> ModelT:
        return self._data

    @property
    def client(self) -> "BravoClient":
        return self._client

    @property
    def deleted(self) -> bool:
        """
        当前实例是否已被用于删除自身

        其他途径删除的实体仍然返回 False。
        """
        return self._deleted

    def has_same_class(self, other: Any) -> bool:
        return type(self) is type(other)

    def equals(self, other: Any) -> bool:
        """两个实例是否表示同一个 Favro 实体（不要求是同一个对象）"""
        return self.has_same_class(other) and self.id == other.id

    def to_json(self) -> Dict[str, Any]:
        return copy.deepcopy(self._raw)
