from __future__ import annotations

TAG_PALETTE = (
    "#3B82F6", "#10B981", "#F59E0B", "#EF4444",
    "#8B5CF6", "#EC4899", "#06B6D4", "#84CC16",
    "#F97316", "#6366F1", "#14B8A6", "#F43F5E",
)


def _hash_tag(tag: str) -> int:
    # 32-bit signed rolling hash (h * 31 + c) so colors stay stable across processes.
    value = 0
    for char in tag:
        value = (ord(char) + ((value << 5) - value)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def tag_color(tag: str, palette: tuple[str, ...] = TAG_PALETTE) -> str:
    return palette[abs(_hash_tag(tag)) % len(palette)]


def normalize_tag(tag: str) -> str:
    return "-".join(tag.strip().lower().split())
