"""
通用查找 / 匹配工具
"""

import base64
import re
import secrets
from typing import Any, Callable, Iterable, List, Optional, Pattern, TypeVar, Union

from bravo.core.errors import BravoNotFoundError, assert_bravo_claim

T = TypeVar("T")

StringOrPattern = Union[str, Pattern[str]]


def strings_match(string1: str, string2: str, ignore_case: bool = False) -> bool:
    if ignore_case:
        for value in (string1, string2):
            assert_bravo_claim(isinstance(value, str), "All inputs must be strings")
        return string1.strip().casefold() == string2.strip().casefold()
    return string1 == string2


def is_match(string_to_check: Optional[str], pattern: StringOrPattern) -> bool:
    """
    字符串为精确匹配，编译后的正则为 search 匹配

    与 re.search 不同，字符串 pattern 不会被当作正则表达式。
    """
    if string_to_check is None:
        return False
    if isinstance(pattern, str):
        return string_to_check == pattern
    return pattern.search(string_to_check) is not None


def create_is_match_filter(
    pattern: StringOrPattern, field_name: Optional[str] = None
) -> Callable[..., bool]:
    """
    构造匹配函数，可直接用于 EntityPager.find / filter

    Args:
        pattern: 字符串或正则
        field_name: 若提供，则匹配对象的该属性，而不是对象本身
    """

    def _filter(value: Any, *_: Any) -> bool:
        if isinstance(value, str):
            return is_match(value, pattern)
        if not field_name:
            return False
        return is_match(getattr(value, field_name, None), pattern)

    return _filter


def find_by_field(
    items: Iterable[T], field_name: str, value: Any, ignore_case: bool = False
) -> Optional[T]:
    assert_bravo_claim(items is not None, "Search list does not exist")
    for item in items:
        item_value = getattr(item, field_name, None)
        if ignore_case and isinstance(item_value, str) and isinstance(value, str):
            if strings_match(item_value, value, ignore_case=True):
                return item
        elif item_value == value:
            return item
    return None


def find_required_by_field(
    items: Iterable[T], field_name: str, value: Any, ignore_case: bool = False
) -> T:
    """
    Raises:
        BravoNotFoundError: 没有匹配的实体
    """
    item = find_by_field(items, field_name, value, ignore_case=ignore_case)
    if item is None:
        raise BravoNotFoundError(f"No entity found with {field_name}={value!r}")
    return item


def strings_or_objects_to_strings(values: Iterable[Any], field_name: str) -> List[str]:
    """接受 ID 字符串或带有该 ID 属性的对象"""
    return [v if isinstance(v, str) else getattr(v, field_name) for v in values]


def generate_random_string(length: int = 24) -> str:
    """生成 base64 随机串（用于 webhook secret）"""
    raw = secrets.token_bytes(length)
    return base64.b64encode(raw).decode("ascii")[:length]


_TRAILING_DIGITS = re.compile(r"(\d+)$")


def sequential_id_to_number(sequential_id: Union[int, str]) -> int:
    """
    卡片序号可以是数字、"PREFIX-123" 或卡片 URL，统一转为整数

    Raises:
        ValueError: 末尾没有数字
    """
    if isinstance(sequential_id, int):
        return sequential_id
    match = _TRAILING_DIGITS.search(sequential_id.strip())
    if not match:
        raise ValueError(f"Not a card sequential id: {sequential_id!r}")
    return int(match.group(1))
