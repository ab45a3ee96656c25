"""
Column registry for report tables

Regions are the visual areas of a rendered row or card (body, list,
footer, image, ...). Each region holds an ordered list of slots, and each
slot is one field of the row bound to an output cell. Styling rules attach
either to a whole region or to specific slots in it.

Regions, slots and rules are closed enums. Unknown names and rules for
slots that are not declared in the region raise ColumnConfigError when the
registry is configured, instead of producing rules nobody reads.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from .exceptions import ColumnConfigError


class Region(str, Enum):
    """Visual areas of a row or card"""

    CARDBODY = "cardbody"
    CARDLIST = "cardlist"
    CARDFOOTER = "cardfooter"
    CARDIMAGE = "cardimage"
    ITEMCATEGORY = "itemcategory"
    ITEMDAY = "itemday"
    OPTIONINVISIBLE = "optioninvisible"
    DATAFIELDS = "datafields"


class Slot(str, Enum):
    """Fields a region can show"""

    TEXT = "text"
    DESCRIPTION = "description"
    DAYOFWEEK = "dayofweek"
    SPORTS = "sports"
    CATEGORY = "category"
    TEACHER = "teacher"
    LOCATION = "location"
    BOOKINGS = "bookings"
    PRICE = "price"
    IMAGE = "image"
    INVISIBLEOPTION = "invisibleoption"
    MAXANSWERS = "maxanswers"
    MAXOVERBOOKING = "maxoverbooking"
    COURSESTARTTIME = "coursestarttime"
    COURSEENDTIME = "courseendtime"


class StyleRule(str, Enum):
    """Presentation attributes of a cell"""

    KEY_CLASS = "columnkeyclass"
    VALUE_CLASS = "columnvalueclass"
    COLUMN_CLASS = "columnclass"
    ICON_BEFORE = "columniclassbefore"
    LABEL_OVERRIDE = "keystring"


class TableClass(str, Enum):
    """Classes applied to the table wrapper elements"""

    LIST_HEADER = "listheaderclass"
    CARD_BODY = "cardbodyclass"
    CARD_IMAGE = "cardimageclass"


SLOT_LABELS: Dict[Slot, str] = {
    Slot.TEXT: "Title",
    Slot.DESCRIPTION: "Description",
    Slot.DAYOFWEEK: "Day of week",
    Slot.SPORTS: "Sport",
    Slot.CATEGORY: "Category",
    Slot.TEACHER: "Teacher",
    Slot.LOCATION: "Location",
    Slot.BOOKINGS: "Bookings",
    Slot.PRICE: "Price",
    Slot.IMAGE: "Image",
    Slot.INVISIBLEOPTION: "Visibility",
    Slot.MAXANSWERS: "Max. participants",
    Slot.MAXOVERBOOKING: "Max. waiting list",
    Slot.COURSESTARTTIME: "Course start",
    Slot.COURSEENDTIME: "Course end",
}

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: Type[E], value: Union[E, str], kind: str) -> E:
    """Convert a name to its enum member or raise ColumnConfigError"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ColumnConfigError(f"Unknown {kind} '{value}'. Allowed: {allowed}")


@dataclass(frozen=True)
class SlotStyle:
    """Resolved presentation of one slot in one region"""

    key_class: Optional[str] = None
    value_class: Optional[str] = None
    column_class: Optional[str] = None
    icon_before: Optional[str] = None
    label_override: Optional[str] = None

    _FIELDS = {
        StyleRule.KEY_CLASS: "key_class",
        StyleRule.VALUE_CLASS: "value_class",
        StyleRule.COLUMN_CLASS: "column_class",
        StyleRule.ICON_BEFORE: "icon_before",
        StyleRule.LABEL_OVERRIDE: "label_override",
    }

    def with_rule(self, rule: StyleRule, value: str) -> "SlotStyle":
        return replace(self, **{self._FIELDS[rule]: value})


RegionLike = Union[Region, str]
SlotLike = Union[Slot, str]


class ColumnRegistry:
    """Regions, their slots and the styling rules attached to them"""

    def __init__(self):
        self._regions: Dict[Region, List[Slot]] = {}
        self._region_rules: Dict[Region, Dict[StyleRule, str]] = {}
        self._slot_rules: Dict[Tuple[Region, Slot], Dict[StyleRule, str]] = {}
        self._table_classes: Dict[TableClass, str] = {}

    def declare_region(self, region: RegionLike, slots: Iterable[SlotLike]) -> "ColumnRegistry":
        """
        Register a region and its slots in display order

        Declaring a region again appends the new slots after the existing
        ones. A slot already in the region keeps its first position.
        """
        region = _coerce(Region, region, "region")
        declared = self._regions.setdefault(region, [])
        for slot in slots:
            slot = _coerce(Slot, slot, "slot")
            if slot not in declared:
                declared.append(slot)
        return self

    def style(
        self,
        region: RegionLike,
        rules: Mapping[Union[StyleRule, str], str],
        slots: Optional[Iterable[SlotLike]] = None,
    ) -> "ColumnRegistry":
        """
        Attach styling rules to a whole region or to some of its slots

        Later calls override earlier ones for the same rule. Slot rules
        win over region rules whatever the call order.

        Raises:
            ColumnConfigError: Unknown rule, undeclared region, or a slot
                that is not part of the region
        """
        region = _coerce(Region, region, "region")
        if region not in self._regions:
            raise ColumnConfigError(f"Region '{region.value}' is not declared", region=region.value)

        parsed = {_coerce(StyleRule, rule, "style rule"): value for rule, value in rules.items()}

        if slots is None:
            self._region_rules.setdefault(region, {}).update(parsed)
            return self

        for slot in slots:
            slot = _coerce(Slot, slot, "slot")
            if slot not in self._regions[region]:
                raise ColumnConfigError(
                    f"Slot '{slot.value}' is not declared in region '{region.value}'",
                    region=region.value,
                    slot=slot.value,
                )
            self._slot_rules.setdefault((region, slot), {}).update(parsed)
        return self

    def set_table_class(self, target: Union[TableClass, str], css_class: str) -> "ColumnRegistry":
        target = _coerce(TableClass, target, "table class")
        self._table_classes[target] = css_class
        return self

    def resolve_style(self, region: RegionLike, slot: SlotLike) -> SlotStyle:
        """Region-wide rules first, then the slot's own rules"""
        region = _coerce(Region, region, "region")
        slot = _coerce(Slot, slot, "slot")

        style = SlotStyle()
        for rule, value in self._region_rules.get(region, {}).items():
            style = style.with_rule(rule, value)
        for rule, value in self._slot_rules.get((region, slot), {}).items():
            style = style.with_rule(rule, value)
        return style

    def label(self, region: RegionLike, slot: SlotLike) -> str:
        slot = _coerce(Slot, slot, "slot")
        override = self.resolve_style(region, slot).label_override
        return override or SLOT_LABELS.get(slot, slot.value)

    def regions(self) -> Dict[Region, List[Slot]]:
        return {region: list(slots) for region, slots in self._regions.items()}

    def has_region(self, region: RegionLike) -> bool:
        return _coerce(Region, region, "region") in self._regions

    def slots(self) -> List[Slot]:
        """All declared slots in first-seen order, without duplicates"""
        seen: List[Slot] = []
        for slots in self._regions.values():
            for slot in slots:
                if slot not in seen:
                    seen.append(slot)
        return seen

    def table_class(self, target: Union[TableClass, str]) -> str:
        return self._table_classes.get(_coerce(TableClass, target, "table class"), "")

    def describe(self) -> Dict[str, Any]:
        """JSON-serialisable description, stable across equal configurations"""
        return {
            "regions": {region.value: [slot.value for slot in slots] for region, slots in self._regions.items()},
            "region_rules": {
                region.value: {rule.value: value for rule, value in sorted(rules.items())}
                for region, rules in self._region_rules.items()
            },
            "slot_rules": {
                f"{region.value}.{slot.value}": {rule.value: value for rule, value in sorted(rules.items())}
                for (region, slot), rules in self._slot_rules.items()
            },
            "table_classes": {target.value: value for target, value in sorted(self._table_classes.items())},
        }
