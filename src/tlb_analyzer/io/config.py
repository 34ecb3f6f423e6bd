"""
Simulation configuration.

A configuration names the trace corpus (by the first-level TLB it was
captured with), the geometry of the simulated caches and the mode:

    tlb_size / tlb_way:
        First-level TLB the traces were recorded with. Only used to select
        trace files (see io.corpus).
    nested_tlb:
        Nested TLB geometry {size, ways}. Used by modes NTLB and FULL.
    page_walk_cache:
        Page walk cache geometry {size, ways}. Used by PWC_EPT, PWC_NOEPT
        and FULL.
    mode:
        0 = NTLB, 1 = PWC_EPT, 2 = PWC_NOEPT, 3 = FULL
        (names are accepted as well).

GEOMETRY:
=========
`size` and `ways` must be positive and `ways` must divide `size`; the
cache is split into `ways` groups of `size / ways` slots. The geometry of a
cache the mode does not use is not checked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tlb_analyzer.errors import ConfigurationError
from tlb_analyzer.io.corpus import MAX_TRACE_FILES
from tlb_analyzer.models.mode import SimulationMode

DEFAULT_TRACE_DIR = Path("./TRACES")


class CacheGeometry(BaseModel):
    """Size and way count of one simulated cache."""

    model_config = ConfigDict(frozen=True)

    size: int = Field(description="Number of cache entries")
    ways: int = Field(description="Number of way groups")


class SimulationConfig(BaseModel):
    """Complete configuration of one batch run."""

    tlb_size: int = Field(ge=1, description="First-level TLB size (selects traces)")
    tlb_way: int = Field(ge=1, description="First-level TLB ways (selects traces)")
    nested_tlb: CacheGeometry
    page_walk_cache: CacheGeometry
    mode: SimulationMode = Field(default=SimulationMode.NTLB)
    trace_dir: Path = Field(default=DEFAULT_TRACE_DIR)
    max_files: int = Field(default=MAX_TRACE_FILES, ge=1)
    jobs: int = Field(default=1, ge=1, description="Worker processes")

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: Any) -> Any:
        """Accept mode numbers, numeric strings and names."""
        if isinstance(v, str):
            v = v.strip()
            if v.isdigit():
                return int(v)
            try:
                return SimulationMode[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid simulation mode: {v}")
        return v

    @model_validator(mode="after")
    def validate_geometry(self) -> "SimulationConfig":
        """Check that the caches used by the mode have a valid geometry."""
        used = []
        if self.mode.uses_nested_tlb:
            used.append(("nested_tlb", self.nested_tlb))
        if self.mode.uses_page_walk_cache:
            used.append(("page_walk_cache", self.page_walk_cache))

        for name, geometry in used:
            if geometry.size < 1 or geometry.ways < 1:
                raise ValueError(
                    f"{name}: size and ways must be positive (got {geometry.size}, {geometry.ways})"
                )
            if geometry.size % geometry.ways != 0:
                raise ValueError(
                    f"{name}: way count {geometry.ways} does not divide size {geometry.size}"
                )
        return self


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "config"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def build_config(
    tlb_size: int,
    tlb_way: int,
    ntlb_size: int,
    pwc_size: int,
    mode: Union[int, str, SimulationMode],
    *,
    ntlb_way: Optional[int] = None,
    pwc_way: Optional[int] = None,
    trace_dir: Optional[Union[str, Path]] = None,
    max_files: int = MAX_TRACE_FILES,
    jobs: int = 1
) -> SimulationConfig:
    """
    Build a configuration from command-line style values.

    All caches share `tlb_way` unless a per-cache way count is given.

    Args:
        tlb_size: First-level TLB size.
        tlb_way: First-level TLB way count.
        ntlb_size: Nested TLB size.
        pwc_size: Page walk cache size.
        mode: Simulation mode.
        ntlb_way: Nested TLB way count override.
        pwc_way: Page walk cache way count override.
        trace_dir: Trace folder (default ./TRACES).
        max_files: Corpus cap.
        jobs: Worker processes.

    Returns:
        Validated SimulationConfig.

    Raises:
        ConfigurationError: If any value is invalid.
    """
    data = {
        "tlb_size": tlb_size,
        "tlb_way": tlb_way,
        "nested_tlb": {"size": ntlb_size, "ways": ntlb_way if ntlb_way is not None else tlb_way},
        "page_walk_cache": {"size": pwc_size, "ways": pwc_way if pwc_way is not None else tlb_way},
        "mode": mode,
        "trace_dir": trace_dir if trace_dir is not None else DEFAULT_TRACE_DIR,
        "max_files": max_files,
        "jobs": jobs,
    }

    try:
        return SimulationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_describe(e)) from e
