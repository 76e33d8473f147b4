"""Tests for the filter registry and option validation."""

import pytest

from ffchain.filters.registry import (
    FilterCategory,
    FilterConfigError,
    FilterRegistry,
    FilterSpec,
    OptionSpec,
    OptionType,
    UnknownFilterError,
    get_registry,
    reset_registry,
)


class TestOptionValidation:
    """OptionSpec.validate() by option type."""

    def test_unset_optional(self):
        assert OptionSpec(name="w").validate(None) == (True, None)

    def test_unset_required(self):
        ok, error = OptionSpec(name="w", required=True).validate(None)
        assert not ok
        assert error == "is required"

    def test_any_accepts_everything(self):
        opt = OptionSpec(name="x")
        for value in (0, "expr", [1, 2], 1.5, False):
            assert opt.validate(value)[0]

    def test_int_range(self):
        opt = OptionSpec(name="n", type=OptionType.INT, min_value=0, max_value=10)
        assert opt.validate(0)[0]
        assert opt.validate(10)[0]
        assert not opt.validate(11)[0]
        assert not opt.validate(-1)[0]
        assert not opt.validate(1.5)[0]
        assert not opt.validate("3")[0]

    def test_float_accepts_int(self):
        opt = OptionSpec(name="gain", type=OptionType.FLOAT, min_value=-15, max_value=15)
        assert opt.validate(3)[0]
        assert opt.validate(-2.5)[0]
        assert not opt.validate(20.0)[0]
        assert not opt.validate(True)[0]

    def test_bool(self):
        opt = OptionSpec(name="alpha", type=OptionType.BOOL)
        for value in (True, False, 0, 1, "true", "off"):
            assert opt.validate(value)[0], value
        assert not opt.validate(2)[0]
        assert not opt.validate("maybe")[0]

    def test_choice(self):
        opt = OptionSpec(name="type", type=OptionType.CHOICE, choices=["in", "out"])
        assert opt.validate("in")[0]
        ok, error = opt.validate("up")
        assert not ok
        assert "one of" in error

    def test_choice_numeric_with_range(self):
        opt = OptionSpec(
            name="type", type=OptionType.CHOICE, choices=["in", "out"],
            min_value=0, max_value=1,
        )
        assert opt.validate(1)[0]
        assert not opt.validate(2)[0]

    def test_choice_numeric_without_range(self):
        # FFmpeg prints INT_MIN/INT_MAX bounds, which load as unbounded
        opt = OptionSpec(name="mode", type=OptionType.CHOICE, choices=["fast", "slow"])
        assert opt.validate(-7)[0]
        assert opt.validate(2.5)[0]
        assert not opt.validate(True)[0]
        assert not opt.validate("medium")[0]

    def test_flags(self):
        opt = OptionSpec(name="flags", type=OptionType.FLAGS, choices=["bilinear", "accurate_rnd"])
        assert opt.validate("bilinear+accurate_rnd")[0]
        assert opt.validate(3)[0]
        ok, error = opt.validate("bilinear+fast")
        assert not ok
        assert "fast" in error

    def test_duration(self):
        opt = OptionSpec(name="d", type=OptionType.DURATION)
        assert opt.validate(2)[0]
        assert opt.validate("00:00:02.5")[0]
        assert not opt.validate("")[0]
        assert not opt.validate([2])[0]

    def test_color_and_size_need_strings(self):
        assert OptionSpec(name="c", type=OptionType.COLOR).validate("black@0.5")[0]
        assert not OptionSpec(name="c", type=OptionType.COLOR).validate(0)[0]
        assert OptionSpec(name="s", type=OptionType.IMAGE_SIZE).validate("hd720")[0]

    def test_rational(self):
        opt = OptionSpec(name="fps", type=OptionType.RATIONAL)
        assert opt.validate("30000/1001")[0]
        assert opt.validate(25)[0]
        assert not opt.validate([25])[0]

    def test_string_accepts_numbers(self):
        opt = OptionSpec(name="w", type=OptionType.STRING)
        assert opt.validate("iw/2")[0]
        assert opt.validate(640)[0]
        assert not opt.validate({"w": 1})[0]


class TestFilterRegistry:
    """Registration, lookup and search."""

    def test_register_and_get(self):
        reg = FilterRegistry()
        spec = FilterSpec(name="hflip", description="Horizontally flip")
        reg.register(spec)

        assert reg.get("hflip") is spec
        assert "hflip" in reg
        assert len(reg) == 1
        assert reg.get("vflip") is None

    def test_require_unknown(self):
        with pytest.raises(UnknownFilterError) as exc_info:
            FilterRegistry().require("nope")
        assert str(exc_info.value) == "Unknown filter 'nope'"
        assert isinstance(exc_info.value, KeyError)

    def test_replace_moves_category(self):
        reg = FilterRegistry()
        reg.register(FilterSpec(name="x", category=FilterCategory.VIDEO))
        reg.register(FilterSpec(name="x", category=FilterCategory.AUDIO))

        assert reg.list_by_category(FilterCategory.VIDEO) == []
        assert [s.name for s in reg.list_by_category(FilterCategory.AUDIO)] == ["x"]
        assert len(reg) == 1

    def test_replace_drops_cached_builder_class(self):
        reg = FilterRegistry()
        reg.register(FilterSpec(name="x", options=[OptionSpec(name="a")]))
        old_cls = reg.builder_class("x")
        reg.register(FilterSpec(name="x", options=[OptionSpec(name="b")]))
        new_cls = reg.builder_class("x")

        assert new_cls is not old_cls
        assert hasattr(new_cls, "b")
        assert not hasattr(new_cls, "a")

    def test_aliases(self):
        reg = FilterRegistry()
        reg.register(FilterSpec(name="scale", aliases=["resize"]))
        reg.register_alias("sz", "scale")

        assert reg.get("resize").name == "scale"
        assert reg.resolve("sz") == "scale"
        assert "resize" in reg
        assert reg.names() == ["scale"]

    def test_search(self, registry):
        names = {s.name for s in registry.search("FADE")}
        assert names == {"fade"}
        # Option names are searchable too
        assert {s.name for s in registry.search("keep_aspect")} == {"crop"}

    def test_list_all_and_iter(self, registry):
        assert [s.name for s in registry] == [s.name for s in registry.list_all()]
        assert len(registry.list_all()) == len(registry)

    def test_builder_class_unknown(self, registry):
        with pytest.raises(UnknownFilterError):
            registry.builder_class("nope")

    def test_spec_option_lookup(self, registry):
        spec = registry.get("fade")
        assert spec.get_option("alpha").type == OptionType.BOOL
        assert spec.get_option("nope") is None
        assert spec.option_names[0] == "type"


class TestFilterConfigError:
    def test_message_with_option(self):
        err = FilterConfigError("fade", "type", "must be one of ['in', 'out']")
        assert str(err) == "fade: option 'type': must be one of ['in', 'out']"
        assert isinstance(err, ValueError)

    def test_message_without_option(self):
        assert str(FilterConfigError("fade", None, "broken")) == "fade: broken"


class TestGlobalRegistry:
    """get_registry() loads the bundled catalog and configured directories."""

    def test_bundled_catalog_loaded(self):
        reg = get_registry()
        assert "fade" in reg
        assert "crop" in reg
        assert "volume" in reg
        assert reg is get_registry()

    def test_reset_reloads(self):
        first = get_registry()
        reset_registry()
        assert get_registry() is not first

    def test_configured_dir_overrides_bundled(self, monkeypatch, tmp_path):
        catalog = tmp_path / "extra"
        catalog.mkdir()
        (catalog / "mine.yaml").write_text(
            "filters:\n"
            "  fade:\n"
            "    category: video\n"
            "    description: My fade\n"
            "  sparkle:\n"
            "    category: video\n"
            "    options:\n"
            "      amount: {type: float, min: 0, max: 1}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("FFCHAIN_CATALOG_DIRS", str(catalog))

        reg = get_registry()
        assert reg.get("fade").description == "My fade"
        assert reg.get("sparkle").get_option("amount").max_value == 1
