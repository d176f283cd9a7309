# screening/sources/mediacloud.py

"""
MediaCloud adapter.

Public, rate-limited story search; no credential. Queries the quoted
subject name once.
"""

from screening.models.inputs import SearchTermSet
from screening.models.outputs import CanonicalRecord
from screening.models.schemas import MediaCloudResponse
from screening.sources.base import SourceAdapter
from screening.utils.validators import assess_source_credibility, normalize_date

MEDIACLOUD_SEARCH_API = "https://search.mediacloud.org/api/search"
MEDIACLOUD_STORY_URL = "https://search.mediacloud.org/stories/{}"


class MediaCloudAdapter(SourceAdapter):
    name = "MediaCloud"
    max_stories = 10

    def __init__(self, settings):
        super().__init__(settings)
        self.timeout = settings.mediacloud_timeout

    def _fetch_records(self, search_terms: SearchTermSet) -> list[CanonicalRecord]:
        payload = self._get_json(
            MEDIACLOUD_SEARCH_API,
            params={"q": f'"{search_terms.subject}"', "limit": self.max_stories},
            headers={"Accept": "application/json"},
        )
        response = MediaCloudResponse.model_validate(payload or {})

        records = []
        for story in response.items:
            publisher = story.media_name or story.source or ""
            url = story.url or ""
            if not url and story.stories_id is not None:
                url = MEDIACLOUD_STORY_URL.format(story.stories_id)
            headline = story.title or story.headline or ""
            records.append(
                CanonicalRecord(
                    headline=headline,
                    source_name=publisher or self.name,
                    source_credibility=assess_source_credibility(publisher),
                    published_date=normalize_date((story.publish_date or "")[:10]),
                    summary=story.snippet or headline,
                    url=url,
                    origin_source=self.name,
                )
            )
        return records
