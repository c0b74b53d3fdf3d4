"""Gallery Sorting — pure filtering and ordering rules for finished work.

Invariants:
    - rating/new views only include public items with flag_count < FLAG_THRESHOLD
    - flagged view includes items with flag_count >= FLAG_THRESHOLD, public or not
    - myGallery view includes exactly the items the actor holds a grant for
    - Unknown modes produce an empty list (fail-soft)
    - Sorts are stable: ties keep their original relative order

Design Decisions:
    - Actor resolution (token -> granted project ids) happens in the service layer;
      this module only receives the resulting id set
    - Unrated items sort as 0 so they land after every rated item
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from pixelcanvas.core.domain_types import FLAG_THRESHOLD, GalleryMode
from pixelcanvas.core.lifecycle import is_publicly_listed
from pixelcanvas.core.project_state import ProjectState

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class GalleryItem:
    """A finished project plus its moderation annotations."""
    project: ProjectState
    average_rating: float | None = None
    flag_count: int = 0

    @property
    def is_flagged(self) -> bool:
        return self.flag_count >= FLAG_THRESHOLD

    def to_dict(self) -> dict:
        data = self.project.to_dict()
        data["average_rating"] = self.average_rating
        data["flag_count"] = self.flag_count
        return data


def _passes_public_filter(item: GalleryItem) -> bool:
    return is_publicly_listed(item.project) and not item.is_flagged


def _finished_key(item: GalleryItem) -> datetime:
    finished_at = item.project.finished_at
    if finished_at is None:
        return _EPOCH
    if finished_at.tzinfo is None:
        return finished_at.replace(tzinfo=timezone.utc)
    return finished_at


def sort_by_rating(gallery: list[GalleryItem]) -> list[GalleryItem]:
    visible = [item for item in gallery if _passes_public_filter(item)]
    return sorted(visible, key=lambda item: item.average_rating or 0.0, reverse=True)


def sort_by_newest(gallery: list[GalleryItem]) -> list[GalleryItem]:
    visible = [item for item in gallery if _passes_public_filter(item)]
    return sorted(visible, key=_finished_key, reverse=True)


def filter_owned(
    gallery: list[GalleryItem], actor_project_ids: set[int],
) -> list[GalleryItem]:
    return [item for item in gallery if item.project.id in actor_project_ids]


def filter_flagged(gallery: list[GalleryItem]) -> list[GalleryItem]:
    return [item for item in gallery if item.is_flagged]


def sort_gallery(
    gallery: list[GalleryItem],
    mode: str,
    actor_project_ids: set[int] | None = None,
) -> list[GalleryItem]:
    """Apply one gallery view. actor_project_ids is only consulted for myGallery."""
    if mode == GalleryMode.RATING.value:
        return sort_by_rating(gallery)
    if mode == GalleryMode.NEW.value:
        return sort_by_newest(gallery)
    if mode == GalleryMode.MY_GALLERY.value:
        return filter_owned(gallery, actor_project_ids or set())
    if mode == GalleryMode.FLAGGED.value:
        return filter_flagged(gallery)
    return []
