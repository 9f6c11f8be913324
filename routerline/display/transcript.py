# display/transcript.py

import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional

from rich.text import Text


@dataclass
class Region:
    """One logical message in the transcript."""
    region_id: int
    role: str
    text: Text


class Transcript:
    """
    Ordered message regions of the visible conversation.

    Regions are addressed by a stable id, so a streaming reply can be replaced
    in place even when notices were added after it. Only the display-owning
    task may mutate a transcript.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._regions: Dict[int, Region] = {}
        self._committed = 0

    def reserve_id(self) -> int:
        """Allocate an id for a region that will be added later."""
        return next(self._ids)

    def add(self, role: str, text: Text, region_id: Optional[int] = None) -> int:
        """Append a region and return its id."""
        region_id = region_id if region_id is not None else self.reserve_id()
        if region_id in self._regions:
            raise KeyError(f"Region {region_id} already exists")
        self._regions[region_id] = Region(region_id, role, text)
        return region_id

    def replace(self, region_id: int, text: Text) -> None:
        """Replace the content of an existing region, keeping its position."""
        self._regions[region_id].text = text

    def upsert(self, region_id: int, role: str, text: Text) -> None:
        if region_id in self._regions:
            self.replace(region_id, text)
        else:
            self.add(role, text, region_id)

    def remove(self, region_id: int) -> bool:
        return self._regions.pop(region_id, None) is not None

    def get(self, region_id: int) -> Optional[Region]:
        return self._regions.get(region_id)

    def __contains__(self, region_id: int) -> bool:
        return region_id in self._regions

    def __len__(self) -> int:
        return len(self._regions)

    @property
    def regions(self) -> List[Region]:
        return list(self._regions.values())

    def pending(self) -> List[Region]:
        """Regions added since the last commit, in order."""
        return [r for r in self._regions.values() if r.region_id > self._committed]

    def commit(self) -> None:
        """Mark every current region as written to the scrollback."""
        if self._regions:
            self._committed = max(self._committed, max(self._regions))

    def render(self, pending_only: bool = False) -> Text:
        regions = self.pending() if pending_only else self.regions
        return Text("\n").join(r.text for r in regions)
