from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"


@dataclass(frozen=True)
class RemoteEntry:
    name: str
    kind: EntryKind
    size: Optional[int] = None

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape of a listing item; ``size`` is left out for directories."""
        data: Dict[str, Any] = {"type": self.kind.value, "name": self.name}
        if not self.is_directory:
            data["size"] = self.size if self.size is not None else 0
        return data

    def __str__(self) -> str:
        return f"{self.kind.value} {self.name}"
