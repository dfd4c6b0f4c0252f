"""
Cascading topic filter for the simulado builder.

The taxonomy has four levels: field -> area -> general topic -> specific
topic. Options for each level are loaded lazily the first time a node is
expanded and cached for the lifetime of the aggregator (the taxonomy is
treated as static, so caches are never invalidated).

Selections resolve to topic ids with one search per leaf-equivalent
selection:

- a checked area means every topic under it; its general and specific
  sub-selections are ignored while it stays checked
- a checked general topic means every topic under it; its specific topics
  are ignored while it stays checked
- otherwise each checked specific topic is searched on its own

Ids are unioned (first occurrence wins the position) and reported to the
`on_change` listener after every selection change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from simulado.core.errors import SimuladoApiError
from simulado.integrations.topics_client import QuestionTopic, TopicsClient

TopicIdsListener = Callable[[list[str]], None]


@dataclass(frozen=True)
class TopicOption:
    code: str
    name: str


@dataclass
class GeneralTopicSelection:
    selected: bool = False
    specific_topics: set[str] = field(default_factory=set)


@dataclass
class AreaSelection:
    selected: bool = False
    general_topics: dict[str, GeneralTopicSelection] = field(default_factory=dict)


def _unique_options(topics: list[QuestionTopic], code_attr: str, name_attr: str) -> list[TopicOption]:
    seen: dict[str, TopicOption] = {}
    for topic in topics:
        code = getattr(topic, code_attr)
        if code and code not in seen:
            seen[code] = TopicOption(code=code, name=getattr(topic, name_attr))
    return list(seen.values())


class TopicFilterAggregator:
    """Selection tree over the topic taxonomy, resolved to topic ids."""

    def __init__(self, topics_client: TopicsClient, on_change: TopicIdsListener | None = None):
        self.client = topics_client
        self.on_change = on_change

        # field code -> area code -> selection
        self.selections: dict[str, dict[str, AreaSelection]] = {}
        self.topic_ids: list[str] = []

        self.expanded_field: str | None = None
        self.expanded_areas: set[str] = set()
        self.expanded_general_topics: set[str] = set()

        self._fields: list[TopicOption] | None = None
        self._areas: dict[str, list[TopicOption]] = {}
        self._general_topics: dict[str, list[TopicOption]] = {}
        self._specific_topics: dict[str, list[str]] = {}

    # =========================================================================
    # Lazy loading
    # =========================================================================

    async def load_fields(self) -> list[TopicOption]:
        if self._fields is not None:
            return self._fields
        try:
            topics = await self.client.search()
        except SimuladoApiError as e:
            logger.error(f"Error loading topic fields: {e}")
            return []
        self._fields = _unique_options(topics, "field_code", "field")
        return self._fields

    async def load_areas(self, field_code: str) -> list[TopicOption]:
        if field_code in self._areas:
            return self._areas[field_code]
        try:
            topics = await self.client.search(field_code=field_code)
        except SimuladoApiError as e:
            logger.error(f"Error loading areas for {field_code}: {e}")
            return []
        self._areas[field_code] = _unique_options(topics, "area_code", "area")
        return self._areas[field_code]

    async def load_general_topics(self, field_code: str, area_code: str) -> list[TopicOption]:
        key = f"{field_code}:{area_code}"
        if key in self._general_topics:
            return self._general_topics[key]
        try:
            topics = await self.client.search(field_code=field_code, area_code=area_code)
        except SimuladoApiError as e:
            logger.error(f"Error loading general topics for {key}: {e}")
            return []
        self._general_topics[key] = _unique_options(topics, "general_topic_code", "general_topic")
        return self._general_topics[key]

    async def load_specific_topics(
        self, field_code: str, area_code: str, general_topic_code: str
    ) -> list[str]:
        key = f"{field_code}:{area_code}:{general_topic_code}"
        if key in self._specific_topics:
            return self._specific_topics[key]
        try:
            topics = await self.client.search(
                field_code=field_code, area_code=area_code, general_topic_code=general_topic_code
            )
        except SimuladoApiError as e:
            logger.error(f"Error loading specific topics for {key}: {e}")
            return []
        self._specific_topics[key] = list(
            dict.fromkeys(t.specific_topic for t in topics if t.specific_topic)
        )
        return self._specific_topics[key]

    # =========================================================================
    # Expansion
    # =========================================================================

    async def toggle_field_expansion(self, field_code: str) -> list[TopicOption]:
        """Expand a field (collapsing any other) and return its areas."""
        if self.expanded_field == field_code:
            self.expanded_field = None
            return []
        self.expanded_field = field_code
        return await self.load_areas(field_code)

    async def toggle_area_expansion(self, field_code: str, area_code: str) -> list[TopicOption]:
        key = f"{field_code}:{area_code}"
        if key in self.expanded_areas:
            self.expanded_areas.discard(key)
            return []
        self.expanded_areas.add(key)
        return await self.load_general_topics(field_code, area_code)

    async def toggle_general_topic_expansion(
        self, field_code: str, area_code: str, general_topic_code: str
    ) -> list[str]:
        key = f"{field_code}:{area_code}:{general_topic_code}"
        if key in self.expanded_general_topics:
            self.expanded_general_topics.discard(key)
            return []
        self.expanded_general_topics.add(key)
        return await self.load_specific_topics(field_code, area_code, general_topic_code)

    # =========================================================================
    # Selection
    # =========================================================================

    def _area(self, field_code: str, area_code: str) -> AreaSelection:
        return self.selections.setdefault(field_code, {}).setdefault(area_code, AreaSelection())

    def _general_topic(
        self, field_code: str, area_code: str, general_topic_code: str
    ) -> GeneralTopicSelection:
        area = self._area(field_code, area_code)
        return area.general_topics.setdefault(general_topic_code, GeneralTopicSelection())

    async def toggle_area(self, field_code: str, area_code: str, checked: bool) -> list[str]:
        self._area(field_code, area_code).selected = checked
        return await self._selection_changed()

    async def toggle_general_topic(
        self, field_code: str, area_code: str, general_topic_code: str, checked: bool
    ) -> list[str]:
        self._general_topic(field_code, area_code, general_topic_code).selected = checked
        return await self._selection_changed()

    async def toggle_specific_topic(
        self,
        field_code: str,
        area_code: str,
        general_topic_code: str,
        specific_topic: str,
        checked: bool,
    ) -> list[str]:
        specifics = self._general_topic(field_code, area_code, general_topic_code).specific_topics
        if checked:
            specifics.add(specific_topic)
        else:
            specifics.discard(specific_topic)
        return await self._selection_changed()

    async def clear(self) -> list[str]:
        """Drop every selection and collapse the tree."""
        self.selections = {}
        self.expanded_field = None
        self.expanded_areas = set()
        self.expanded_general_topics = set()
        return await self._selection_changed()

    def selected_count(self) -> int:
        """Number of checked nodes across areas, general and specific topics."""
        count = 0
        for areas in self.selections.values():
            for area in areas.values():
                count += int(area.selected)
                for general in area.general_topics.values():
                    count += int(general.selected) + len(general.specific_topics)
        return count

    # =========================================================================
    # Resolution
    # =========================================================================

    async def resolve(self) -> list[str]:
        """
        Resolve the current selections to a deduplicated list of topic ids.

        Raises:
            SimuladoApiError: When any search fails
        """
        ids: dict[str, None] = {}

        async def collect(**filters: str) -> None:
            for topic in await self.client.search(**filters):
                ids.setdefault(topic.id, None)

        for field_code, areas in self.selections.items():
            for area_code, area in areas.items():
                if area.selected:
                    await collect(field_code=field_code, area_code=area_code)
                    continue

                for general_code, general in area.general_topics.items():
                    if general.selected:
                        await collect(
                            field_code=field_code,
                            area_code=area_code,
                            general_topic_code=general_code,
                        )
                        continue

                    for specific in sorted(general.specific_topics):
                        await collect(
                            field_code=field_code,
                            area_code=area_code,
                            general_topic_code=general_code,
                            specific_topic=specific,
                        )

        return list(ids)

    async def _selection_changed(self) -> list[str]:
        try:
            topic_ids = await self.resolve()
        except SimuladoApiError as e:
            # Keep the last resolved ids; the next change resolves again
            logger.error(f"Error updating topic ids: {e}")
            return self.topic_ids

        self.topic_ids = topic_ids
        if self.on_change:
            self.on_change(topic_ids)
        return topic_ids
