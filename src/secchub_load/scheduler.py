"""Stage-based ramp scheduling.

Determines the target number of concurrent virtual users for any moment
of the run from a list of (duration, target) stages.
"""

import math
import re
from dataclasses import dataclass

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")

_UNIT_SECONDS: dict[str, float] = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


@dataclass(frozen=True)
class Stage:
    """Ramp linearly to ``target`` virtual users over ``duration`` seconds."""
    duration: float
    target: int


def parse_duration(text: str) -> float:
    """Convert '1m30s', '10s', '500ms' or a bare number of seconds to seconds."""
    text = text.strip()
    if not text:
        raise ValueError("Empty duration")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"Duration must be a finite number of seconds >= 0: {text!r}")
        return seconds

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"Invalid duration: {text!r}")
    return total


def parse_stages(text: str) -> list[Stage]:
    """Parse 'duration:target,duration:target,...' into stages."""
    stages = []
    for entry in text.split(","):
        entry = entry.strip()
        if not entry:
            continue
        duration, sep, target = entry.partition(":")
        if not sep:
            raise ValueError(f"Invalid stage {entry!r}, expected duration:target")
        try:
            target_vus = int(target)
        except ValueError:
            raise ValueError(f"Invalid stage target in {entry!r}") from None
        if target_vus < 0:
            raise ValueError(f"Stage target must be >= 0 in {entry!r}")
        stages.append(Stage(duration=parse_duration(duration), target=target_vus))

    if not stages:
        raise ValueError("At least one stage is required")
    return stages


def total_duration(stages: list[Stage]) -> float:
    return sum(stage.duration for stage in stages)


def max_vus(stages: list[Stage]) -> int:
    return max((stage.target for stage in stages), default=0)


def target_vus(stages: list[Stage], elapsed: float) -> int:
    """Return the target virtual-user count ``elapsed`` seconds into the run.

    Each stage interpolates linearly from the previous stage's target
    (0 before the first stage) to its own target. Past the end of the
    profile the target is 0.
    """
    if elapsed < 0:
        return 0

    start_target = 0
    stage_start = 0.0
    for stage in stages:
        stage_end = stage_start + stage.duration
        if elapsed < stage_end:
            progress = (elapsed - stage_start) / stage.duration
            return round(start_target + (stage.target - start_target) * progress)
        start_target = stage.target
        stage_start = stage_end
    return 0
