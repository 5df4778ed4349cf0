# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

from podscaler.workload import WorkloadDescriptor


@dataclass(frozen=True)
class WavePlan:
    """Workloads partitioned by wave number, with waves in ascending order."""

    groups: Dict[int, Tuple[WorkloadDescriptor, ...]] = field(default_factory=dict)
    order: Tuple[int, ...] = ()

    def __iter__(self) -> Iterator[Tuple[int, Tuple[WorkloadDescriptor, ...]]]:
        for wave in self.order:
            yield wave, self.groups[wave]

    def __len__(self) -> int:
        return len(self.order)


def group_by_wave(descriptors: Iterable[WorkloadDescriptor]) -> WavePlan:
    """Group descriptors by their wave number.

    Within a wave the input order is kept. Never fails; an empty input gives
    an empty plan.
    """
    groups: Dict[int, List[WorkloadDescriptor]] = {}
    for descriptor in descriptors:
        groups.setdefault(descriptor.wave, []).append(descriptor)
    return WavePlan(
        groups={wave: tuple(members) for wave, members in groups.items()},
        order=tuple(sorted(groups)),
    )
