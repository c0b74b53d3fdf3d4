"""Gallery Service — finished projects annotated with ratings and flag counts.

Invariants:
    - Only finished projects enter the gallery
    - Each item's rating and flag count are fetched independently and concurrently,
      then joined before the list is returned
    - myGallery resolves the actor from the bearer token; other modes ignore it

Design Decisions:
    - asyncio.gather per item: each fetch opens its own session, so one slow
      aggregate never serializes the rest
    - Sorting delegated to core/gallery.py (pure, tested without a DB)
"""

import asyncio
import logging

from pixelcanvas.core.domain_types import GalleryMode, ProjectId
from pixelcanvas.core.gallery import GalleryItem, sort_gallery
from pixelcanvas.core.repository_protocols import ModerationStore, ProjectStore
from pixelcanvas.infrastructure.tokens import TokenVerifier

logger = logging.getLogger(__name__)


class GalleryService:
    """Builds gallery views over the project and moderation stores."""

    def __init__(
        self,
        projects: ProjectStore,
        moderation: ModerationStore,
        verifier: TokenVerifier,
    ):
        self._projects = projects
        self._moderation = moderation
        self._verifier = verifier

    async def annotate_ratings(self, gallery: list[GalleryItem]) -> list[GalleryItem]:
        averages = await asyncio.gather(
            *(self._moderation.average_rating(item.project.id) for item in gallery),
        )
        for item, average in zip(gallery, averages):
            item.average_rating = average
        return gallery

    async def annotate_flags(self, gallery: list[GalleryItem]) -> list[GalleryItem]:
        counts = await asyncio.gather(
            *(self._moderation.flag_count(item.project.id) for item in gallery),
        )
        for item, count in zip(gallery, counts):
            item.flag_count = count
        return gallery

    async def list_gallery(self) -> list[GalleryItem]:
        """All finished projects with rating and flag annotations attached."""
        finished = await self._projects.load_finished_projects()
        gallery = [GalleryItem(project=project) for project in finished]
        await self.annotate_ratings(gallery)
        await self.annotate_flags(gallery)
        return gallery

    async def sorted_gallery(
        self, mode: str, token: str | None = None,
    ) -> list[GalleryItem]:
        """Gallery filtered and ordered for one view. Raises AuthenticationError
        for myGallery without a valid token."""
        actor_project_ids: set[ProjectId] | None = None
        if mode == GalleryMode.MY_GALLERY.value:
            identity = self._verifier.verify(token)
            actor_project_ids = await self._projects.permitted_project_ids(
                identity.user_id,
            )
        gallery = await self.list_gallery()
        return sort_gallery(gallery, mode, actor_project_ids)
