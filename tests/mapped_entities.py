from dataclasses import dataclass
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel

from pgmapper.metadata import Column, Id, table


@table("users", schema="public")
@dataclass
class User:
    id: Annotated[int, Id("id")]
    name: Annotated[str, Column("name")]
    age: Annotated[int, Column("age")]


@table("admins", schema="public")
@dataclass
class Admin(User):
    level: Annotated[int, Column("access_level")] = 1


@table("notes")
class Note:
    """Plain class with an unmapped field and a hand-written constructor"""

    note_id: Annotated[int, Id()]
    title: Annotated[str, Column()]
    draft: bool
    registry: ClassVar[dict[str, Any]] = {}

    def __init__(self, note_id, title):
        self.note_id = note_id
        self.title = title
        self.draft = True


@table("memberships", schema="app")
@dataclass
class Membership:
    group_id: Annotated[int, Id("group_id")]
    user_id: Annotated[int, Id("user_id")]
    role: Annotated[str, Column("role")]


@table("audit", schema="public")
@dataclass
class AuditEntry:
    message: Annotated[str, Column("message")]
    level: Annotated[str, Column("level")]


@dataclass
class Unbound:
    id: Annotated[int, Id("id")]


@table("gadgets", schema="public")
class Gadget:
    """Two mapped fields but a one-argument constructor"""

    id: Annotated[int, Id("id")]
    name: Annotated[str, Column("name")]

    def __init__(self, name):
        self.name = name


@table("products", schema="shop")
class Product(BaseModel):
    sku: Annotated[str, Id("sku")]
    price: Annotated[float, Column("price")]
    in_stock: Annotated[bool, Column("in_stock")] = True


@table("tags", schema="public", factory=lambda values: Tag.from_row(values))
class Tag:
    """Rebuilt through an explicit factory instead of its constructor"""

    tag_id: Annotated[int | None, Id("tag_id")]
    label: Annotated[str, Column("label")]

    def __init__(self, label: str):
        self.label = label
        self.tag_id = None

    @classmethod
    def from_row(cls, values: dict[str, Any]) -> "Tag":
        tag = cls(values["label"])
        tag.tag_id = values["tag_id"]
        return tag


@table("sequences", schema="public")
@dataclass
class Counter:
    id: Annotated[int, Id("id")]
