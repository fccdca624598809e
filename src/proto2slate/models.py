from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Field:
    name: str
    type_name: str
    comment: str = ""
    is_repeated: bool = False
    map_key: Optional[str] = None

    @property
    def is_map(self) -> bool:
        return self.map_key is not None


@dataclass
class Message:
    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass
class EnumDef:
    name: str
    values: List[str] = field(default_factory=list)
    comment: str = ""


@dataclass
class RpcCall:
    name: str
    request_type: str
    response_type: str
    comment: str = ""
    stream: bool = False
    shell: Optional[str] = None


@dataclass
class Service:
    name: str
    comment: str = ""
    calls: List[RpcCall] = field(default_factory=list)


@dataclass
class ProtoSchema:
    """Everything recovered from one proto file, in declaration order."""

    services: List[Service] = field(default_factory=list)
    messages: Dict[str, Message] = field(default_factory=dict)
    enums: Dict[str, EnumDef] = field(default_factory=dict)

    def is_known_type(self, type_name: str) -> bool:
        return type_name in self.messages or type_name in self.enums
