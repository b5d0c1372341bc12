"""Configuration for map streaming, loading and rendering."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _build(kind, data: Mapping[str, Any]):
    names = [f.name for f in dataclasses.fields(kind)]
    missing = [name for name in names if name not in data]
    if missing:
        raise ValueError(f"missing field(s) for {kind.__name__}: {', '.join(missing)}")
    return kind(**{name: data[name] for name in names})


@dataclass(frozen=True)
class StreamingConfig:
    """Thresholds that decide which chunks are loaded and rendered.

    A chunk is a render candidate when ``D < R + clip_sphere_radius`` and
    ``D / R > detail``, where ``D`` is the distance from the observer to the
    chunk's centre and ``R`` the radius of its bounding sphere (both at LOD0).
    """

    detail: float = 6.0
    clip_sphere_radius: float = 1000.0

    def is_render_candidate(self, center_distance: float, bounding_radius: float) -> bool:
        return (
            center_distance < bounding_radius + self.clip_sphere_radius
            and center_distance / bounding_radius > self.detail
        )


@dataclass(frozen=True)
class RenderConfig:
    mesh_generation_frame_time_budget_pct: int = 20
    wireframes: bool = False
    lod_colors: bool = False
    msaa: Optional[int] = 4

    def __post_init__(self) -> None:
        if not 0 <= self.mesh_generation_frame_time_budget_pct <= 100:
            raise ValueError("mesh generation budget must be a percentage in [0, 100]")
        if self.msaa is not None and self.msaa < 0:
            raise ValueError("msaa sample count must not be negative")


@dataclass(frozen=True)
class LoaderConfig:
    load_batch_size: int = 256
    max_pending_load_tasks: int = 16

    def __post_init__(self) -> None:
        if self.load_batch_size < 0 or self.max_pending_load_tasks < 0:
            raise ValueError("loader limits must not be negative")


@dataclass(frozen=True)
class MapConfig:
    num_lods: int = 10
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)

    def __post_init__(self) -> None:
        if not 0 <= self.num_lods <= 255:
            raise ValueError("num_lods must fit in 8 bits")

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MapConfig":
        fields = dict(data)
        for key, kind in (("loader", LoaderConfig), ("streaming", StreamingConfig)):
            if key in fields:
                fields[key] = _build(kind, fields[key])
        return _build(cls, fields)