"""
Topic taxonomy client.

The taxonomy has four levels: field -> area -> general topic -> specific
topic. Distinct-value endpoints list the names or codes available at each
level; `search` returns full topic records (with the ids the exam service
filters on) for any combination of level codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from simulado.integrations.base import BaseApiClient


@dataclass(frozen=True)
class QuestionTopic:
    """A leaf of the taxonomy, with the codes of every ancestor."""

    id: str
    field: str
    field_code: str
    area: str
    area_code: str
    general_topic: str
    general_topic_code: str
    specific_topic: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionTopic:
        return cls(
            id=str(data.get("id", "")),
            field=data.get("field", ""),
            field_code=data.get("field_code", ""),
            area=data.get("area", ""),
            area_code=data.get("area_code", ""),
            general_topic=data.get("general_topic", ""),
            general_topic_code=data.get("general_topic_code", ""),
            specific_topic=data.get("specific_topic", ""),
        )


def _level_params(**codes: str | None) -> dict[str, str]:
    return {name: value for name, value in codes.items() if value}


class TopicsClient(BaseApiClient):
    """HTTP client for the question-topics API."""

    async def _distinct(self, level: str, params: dict[str, str] | None = None) -> list[str]:
        action = f"fetch distinct {level}"
        response = await self._request(
            "GET", f"/distinct/{level}", action, retry=True, params=params or {}
        )
        return self._parse(response, action, lambda data: list(data.get("data") or []))

    async def get_distinct_fields(self) -> list[str]:
        return await self._distinct("fields")

    async def get_distinct_field_codes(self) -> list[str]:
        return await self._distinct("field-codes")

    async def get_distinct_areas(self, field_code: str | None = None) -> list[str]:
        return await self._distinct("areas", _level_params(field_code=field_code))

    async def get_distinct_area_codes(self, field_code: str | None = None) -> list[str]:
        return await self._distinct("area-codes", _level_params(field_code=field_code))

    async def get_distinct_general_topics(
        self, field_code: str | None = None, area_code: str | None = None
    ) -> list[str]:
        return await self._distinct(
            "general-topics", _level_params(field_code=field_code, area_code=area_code)
        )

    async def get_distinct_specific_topics(
        self,
        field_code: str | None = None,
        area_code: str | None = None,
        general_topic_code: str | None = None,
    ) -> list[str]:
        return await self._distinct(
            "specific-topics",
            _level_params(
                field_code=field_code, area_code=area_code, general_topic_code=general_topic_code
            ),
        )

    async def distinct_level(
        self,
        field_code: str | None = None,
        area_code: str | None = None,
        general_topic_code: str | None = None,
    ) -> tuple[list[str], list[str]]:
        """
        Distinct names and codes one level below the given codes.

        Only fields and areas have a codes endpoint; deeper levels return an
        empty code list.
        """
        if field_code and area_code and general_topic_code:
            names = await self.get_distinct_specific_topics(field_code, area_code, general_topic_code)
            return names, []
        if field_code and area_code:
            return await self.get_distinct_general_topics(field_code, area_code), []
        if field_code:
            return (
                await self.get_distinct_areas(field_code),
                await self.get_distinct_area_codes(field_code),
            )
        return await self.get_distinct_fields(), await self.get_distinct_field_codes()

    async def search(
        self,
        field_code: str | None = None,
        area_code: str | None = None,
        general_topic_code: str | None = None,
        specific_topic: str | None = None,
    ) -> list[QuestionTopic]:
        """
        Return every topic record matching the given level filters.

        `specific_topic` is sent as the free-text `search` parameter; all
        pages are requested at once (pageSize=-1).
        """
        params: dict[str, Any] = {"pageSize": -1}
        params.update(
            _level_params(
                field_code=field_code, area_code=area_code, general_topic_code=general_topic_code
            )
        )
        if specific_topic:
            params["search"] = specific_topic

        response = await self._request(
            "GET", "/", "search question topics", retry=True, params=params
        )
        return self._parse(
            response,
            "search question topics",
            lambda data: [QuestionTopic.from_dict(item) for item in data.get("data") or []],
        )
