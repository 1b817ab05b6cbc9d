"""
Group-by-group comparison of two versions of an achievement.

Used to show what a local script changes relative to another copy (for
example the published one). The core group is compared with the core
group and Alt N with Alt N. When one side has fewer alternates the
missing groups compare as empty.
"""

import difflib
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import List, Optional

from ..data.achievement import Achievement
from ..data.requirement import Requirement


@dataclass(frozen=True)
class RequirementComparison:
    local: Optional[Requirement]
    other: Optional[Requirement]

    @property
    def is_modified(self) -> bool:
        return self.local != self.other


@dataclass
class GroupComparison:
    label: str
    requirements: List[RequirementComparison] = field(default_factory=list)

    @property
    def is_modified(self) -> bool:
        return any(r.is_modified for r in self.requirements)


@dataclass
class AchievementComparison:
    local: Achievement
    other: Achievement
    is_title_modified: bool = False
    is_description_modified: bool = False
    is_points_modified: bool = False
    groups: List[GroupComparison] = field(default_factory=list)

    @property
    def is_modified(self) -> bool:
        return (
            self.is_title_modified
            or self.is_description_modified
            or self.is_points_modified
            or any(g.is_modified for g in self.groups)
        )


def compare_requirements(label: str, local: List[Requirement], other: List[Requirement]) -> GroupComparison:
    """Pair up two requirement groups.

    Identical runs are matched first; the requirements left between them
    are paired in order, with None filling the shorter side.
    """
    group = GroupComparison(label)
    matcher = difflib.SequenceMatcher(
        a=[r.serialize() for r in local], b=[r.serialize() for r in other], autojunk=False
    )
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            group.requirements.extend(RequirementComparison(r, r) for r in local[i1:i2])
        else:
            group.requirements.extend(
                RequirementComparison(a, b) for a, b in zip_longest(local[i1:i2], other[j1:j2])
            )
    return group


def compare_achievements(local: Achievement, other: Achievement) -> AchievementComparison:
    comparison = AchievementComparison(
        local=local,
        other=other,
        is_title_modified=local.title != other.title,
        is_description_modified=local.description != other.description,
        is_points_modified=local.points != other.points,
    )
    comparison.groups.append(compare_requirements("Core", local.core_requirements, other.core_requirements))

    alternates = zip_longest(local.alternate_requirements, other.alternate_requirements, fillvalue=[])
    for i, (mine, theirs) in enumerate(alternates, start=1):
        comparison.groups.append(compare_requirements(f"Alt {i}", mine, theirs))
    return comparison
