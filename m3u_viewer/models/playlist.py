"""Playlist model for grouped M3U channel lists."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
from .channel import Channel
from ..errors import InvalidArgumentError


@dataclass(frozen=True, eq=False)
class Group:
    """A named, ordered list of channels. The name never changes."""

    name: str
    channels: List[Channel] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.channels)


@dataclass
class Playlist:
    """Represents a parsed M3U playlist: groups in first-seen order."""

    name: str = ""
    source: str = ""  # URL or file path
    groups: List[Group] = field(default_factory=list)
    _index: Dict[str, Group] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        for group in self.groups:
            self._index.setdefault(group.name, group)

    def __iter__(self) -> Iterator[Channel]:
        for group in self.groups:
            yield from group.channels

    @property
    def total_entries(self) -> int:
        return sum(len(group.channels) for group in self.groups)

    def find_group(self, name: Optional[str]) -> Optional[Group]:
        """Find a group by exact, case-sensitive name. First match wins."""
        if name is None:
            return None
        return self._index.get(name)

    def new_group(self, name: str) -> Group:
        """Append a new empty group."""
        if name is None:
            raise InvalidArgumentError("group name must not be None")
        group = Group(name=name)
        self.groups.append(group)
        # Index keeps pointing at the first group created under a name.
        self._index.setdefault(name, group)
        return group

    def new_entry(self, group_name: str, name: str, logo: str, url: str) -> Channel:
        """Append a channel to ``group_name``, creating the group if needed."""
        if group_name is None:
            raise InvalidArgumentError("group name must not be None")

        group = self.find_group(group_name)
        if group is None:
            group = self.new_group(group_name)

        if name is None or logo is None or url is None:
            raise InvalidArgumentError("channel name, logo and url must not be None")

        channel = Channel(url=str(url), name=str(name), logo=str(logo))
        group.channels.append(channel)
        return channel

    def destroy(self):
        """Release every decoded logo, channel and group.

        Meant to be called once, when the viewer shuts down.
        """
        for group in self.groups:
            for channel in group.channels:
                channel.release_logo()
            group.channels.clear()
        self.groups.clear()
        self._index.clear()

    def get_groups(self) -> List[str]:
        """Get group names in first-seen order."""
        return [group.name for group in self.groups]

    def get_channels_by_group(self, group: str) -> List[Channel]:
        """Get the channels of one group, or an empty list."""
        found = self.find_group(group)
        return list(found.channels) if found else []

    def search_channels(self, query: str) -> List[Channel]:
        """Search channels by name."""
        query = query.lower()
        return [ch for ch in self if query in ch.name.lower()]
