from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

Value = Union[float, Tuple[float, ...]]


@dataclass(frozen=True)
class Record:
    """
    One normalised observation ready for plotting.

    value: a finite number, or a tuple of finite numbers (scatter: x, y).
    category: palette category or display label.
    key: ordering key; a datetime for temporal series, a label for ordinal ones.
    attrs: extra read-only display attributes (brand, year, ...).
    """
    value: Value
    category: Optional[str] = None
    key: Any = None
    attrs: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))


# Built once per load, replaced wholesale on reload
Dataset = Tuple[Record, ...]

EMPTY: Dataset = ()
