"""Rotation Policy: the slot layout and limits one rotation run works within."""

from dataclasses import dataclass

DEFAULT_ASSET_PREFIXES = ("http://", "https://", "data:")


@dataclass(frozen=True)
class RotationPolicy:
    slot_count: int = 2000
    group_size: int = 200
    batch_limit: int = 500
    allowed_asset_prefixes: tuple[str, ...] = DEFAULT_ASSET_PREFIXES
    compact_slots: bool = False

    @property
    def group_count(self) -> int:
        return self.slot_count // self.group_size
