"""Controllers for fields split over several inputs (dates, addresses, coordinates)."""

from datetime import date
from typing import Any, Dict, List

from formqa_agent.conditions.date_math import to_day_month_year
from formqa_agent.controllers.base import (BaseFieldController, Selector,
                                           input_action)


class BaseCompositeFieldController(BaseFieldController):
    def find(self) -> Selector:
        return Selector(role="group", name=self.title)


class DatePartsFieldController(BaseCompositeFieldController):
    def find_part(self, part: str) -> Selector:
        return Selector(css=f"#{self.name}__{part}")

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if len(values) == 1:
            parts = values[0]
            if isinstance(parts, date):
                parts = to_day_month_year(parts)
        else:
            parts = values
        if not parts:
            return []
        day, month, year = parts
        return [
            input_action(self.find_part("day"), f"{int(day):02d}"),
            input_action(self.find_part("month"), f"{int(month):02d}"),
            input_action(self.find_part("year"), str(int(year))),
        ]


class UkAddressFieldController(BaseCompositeFieldController):
    # form data key -> input id suffix
    PARTS = (
        ("addressLine1", "addressLine1"),
        ("addressLine2", "addressLine2"),
        ("townOrCity", "town"),
        ("county", "county"),
        ("postcode", "postcode"),
    )

    @property
    def uses_postcode_lookup(self) -> bool:
        return self.component.options.get("usePostcodeLookup") is True

    def find_part(self, suffix: str) -> Selector:
        return Selector(css=f"#{self.name}__{suffix}")

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if not values or not isinstance(values[0], dict):
            return []
        address = values[0]
        return [
            input_action(self.find_part(suffix), address[key])
            for key, suffix in self.PARTS
            if address.get(key)
        ]


class _CoordinatePairController(BaseCompositeFieldController):
    part_names = ("", "")

    def fill_actions(self, *values) -> List[Dict[str, Any]]:
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        if len(values) < 2:
            return []
        return [
            input_action(Selector(role="textbox", name=part), value)
            for part, value in zip(self.part_names, values)
        ]


class EastingNorthingFieldController(_CoordinatePairController):
    part_names = ("Easting", "Northing")


class LatLongFieldController(_CoordinatePairController):
    part_names = ("Latitude", "Longitude")
