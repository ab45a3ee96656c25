"""
Test the column registry
"""
import pytest

from report_table.columns import ColumnRegistry, Region, Slot, SlotStyle, StyleRule, TableClass
from report_table.exceptions import ColumnConfigError


@pytest.fixture
def registry():
    registry = ColumnRegistry()
    registry.declare_region(Region.CARDBODY, [Slot.SPORTS, Slot.TEXT, Slot.TEACHER])
    return registry


class TestDeclareRegion:
    def test_slots_keep_declaration_order(self, registry):
        assert registry.regions()[Region.CARDBODY] == [Slot.SPORTS, Slot.TEXT, Slot.TEACHER]

    def test_repeated_declaration_appends(self, registry):
        """Test declaring a region again adds slots after the existing ones"""
        registry.declare_region("cardbody", ["location", "text"])

        assert registry.regions()[Region.CARDBODY] == [Slot.SPORTS, Slot.TEXT, Slot.TEACHER, Slot.LOCATION]

    def test_slot_may_appear_in_several_regions(self, registry):
        registry.declare_region(Region.DATAFIELDS, [Slot.SPORTS])

        assert registry.slots() == [Slot.SPORTS, Slot.TEXT, Slot.TEACHER]
        assert registry.has_region("datafields")

    def test_unknown_names_raise(self, registry):
        with pytest.raises(ColumnConfigError):
            registry.declare_region("sidebar", [Slot.TEXT])
        with pytest.raises(ColumnConfigError):
            registry.declare_region(Region.CARDBODY, ["nosuchslot"])

    def test_regions_returns_copies(self, registry):
        registry.regions()[Region.CARDBODY].append(Slot.PRICE)

        assert Slot.PRICE not in registry.regions()[Region.CARDBODY]


class TestStyleResolution:
    def test_slot_rule_overrides_region_rule(self, registry):
        """Test a slot-specific h5 wins over the region-wide h6"""
        registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h6"})
        registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5"}, [Slot.TEXT])

        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).value_class == "h5"
        assert registry.resolve_style(Region.CARDBODY, Slot.SPORTS).value_class == "h6"

    def test_slot_rule_wins_regardless_of_call_order(self, registry):
        registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5"}, [Slot.TEXT])
        registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h6"})

        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).value_class == "h5"

    def test_later_rule_overrides_earlier(self, registry):
        registry.style(Region.CARDBODY, {StyleRule.KEY_CLASS: "d-md-none"})
        registry.style(Region.CARDBODY, {StyleRule.KEY_CLASS: "d-none"})
        registry.style(Region.CARDBODY, {StyleRule.ICON_BEFORE: "fa fa-clock-o"}, [Slot.TEXT])
        registry.style(Region.CARDBODY, {StyleRule.ICON_BEFORE: "fa fa-users"}, [Slot.TEXT])

        style = registry.resolve_style(Region.CARDBODY, Slot.TEXT)
        assert style.key_class == "d-none"
        assert style.icon_before == "fa fa-users"

    def test_rules_combine(self, registry):
        registry.style("cardbody", {"columnkeyclass": "d-none"})
        registry.style("cardbody", {"columnvalueclass": "h5", "columnclass": "col-md-3"}, ["text"])

        assert registry.resolve_style("cardbody", "text") == SlotStyle(
            key_class="d-none", value_class="h5", column_class="col-md-3"
        )

    def test_unstyled_slot_has_empty_style(self, registry):
        assert registry.resolve_style(Region.CARDBODY, Slot.TEACHER) == SlotStyle()

    def test_misspelled_rule_raises(self, registry):
        """Test a typo in a rule name is caught instead of silently ignored"""
        with pytest.raises(ColumnConfigError):
            registry.style(Region.CARDBODY, {"columvalueclass": "h6"}, [Slot.SPORTS])

    def test_styling_undeclared_slot_raises(self, registry):
        with pytest.raises(ColumnConfigError) as exc_info:
            registry.style(Region.CARDBODY, {StyleRule.LABEL_OVERRIDE: "Max"}, [Slot.MAXANSWERS])

        assert exc_info.value.details == {"region": "cardbody", "slot": "maxanswers"}

    def test_styling_undeclared_region_raises(self, registry):
        with pytest.raises(ColumnConfigError):
            registry.style(Region.CARDFOOTER, {StyleRule.KEY_CLASS: "d-none"})

    def test_styles_are_per_region(self, registry):
        registry.declare_region(Region.CARDLIST, [Slot.TEXT])
        registry.style(Region.CARDLIST, {StyleRule.VALUE_CLASS: "small"}, [Slot.TEXT])

        assert registry.resolve_style(Region.CARDBODY, Slot.TEXT).value_class is None


class TestLabelsAndTableClasses:
    def test_default_label(self, registry):
        assert registry.label(Region.CARDBODY, Slot.TEACHER) == "Teacher"

    def test_label_override(self, registry):
        registry.style(Region.CARDBODY, {StyleRule.LABEL_OVERRIDE: "Trainer"}, [Slot.TEACHER])

        assert registry.label(Region.CARDBODY, Slot.TEACHER) == "Trainer"

    def test_table_classes(self, registry):
        registry.set_table_class(TableClass.CARD_IMAGE, "w-100")

        assert registry.table_class("cardimageclass") == "w-100"
        assert registry.table_class(TableClass.LIST_HEADER) == ""


class TestDescribe:
    def test_equal_configurations_describe_equal(self):
        def build():
            registry = ColumnRegistry()
            registry.declare_region(Region.CARDBODY, [Slot.TEXT, Slot.SPORTS])
            registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5", StyleRule.KEY_CLASS: "d-none"}, [Slot.TEXT])
            registry.set_table_class(TableClass.CARD_BODY, "list-group-item")
            return registry

        assert build().describe() == build().describe()

    def test_describe_uses_plain_names(self, registry):
        registry.style(Region.CARDBODY, {StyleRule.VALUE_CLASS: "h5"}, [Slot.TEXT])

        description = registry.describe()
        assert description["regions"] == {"cardbody": ["sports", "text", "teacher"]}
        assert description["slot_rules"] == {"cardbody.text": {"columnvalueclass": "h5"}}
