"""Tests for the fluent filter builders."""

import pytest

from ffchain import FFmpegCommand
from ffchain.filters.builder import (
    RESERVED_NAMES,
    FilterBuilder,
    make_builder_class,
    setter_name,
)
from ffchain.filters.registry import FilterConfigError, FilterSpec, OptionSpec


# ── Setting options and building ──────────────────────────────────────


class TestBuild:
    """build() hands one descriptor to the host and returns the host."""

    def test_fade_example(self, command):
        command.fade().type("in").start_time(2).build()

        [descriptor] = command.filters
        assert descriptor.filter == "fade"
        assert dict(descriptor.options) == {"type": "in", "start_time": 2}
        assert "nb_frames" not in descriptor.options

    def test_crop_keeps_zero_height(self, command):
        command.crop().w(640).h(0).build()

        [descriptor] = command.filters
        assert dict(descriptor.options) == {"w": 640, "h": 0}

    @pytest.mark.parametrize("value", [0, False, ""])
    def test_falsy_values_are_kept(self, command, value):
        command.crop().x(value).build()
        assert command.filters[0].options == {"x": value}

    def test_no_setters_gives_empty_options(self, command):
        command.hflip().build()
        descriptor = command.filters[0]
        assert descriptor.filter == "hflip"
        assert dict(descriptor.options) == {}

    def test_build_returns_same_host(self, command):
        assert command.fade().build() is command

    def test_one_descriptor_per_build_in_order(self, command):
        command.fade().type("in").build()
        assert len(command.filters) == 1
        command.crop().w(100).build()
        assert len(command.filters) == 2
        command.fade().type("out").build()

        assert [d.filter for d in command.filters] == ["fade", "crop", "fade"]
        assert command.filters[2].options["type"] == "out"

    def test_build_chains_back_into_host(self, command):
        result = (
            command.fade().type("in").build()
            .crop().w(320).build()
            .hflip().build()
        )
        assert result is command
        assert len(command.filters) == 3

    def test_factory_returns_independent_builders(self, command):
        first = command.fade()
        second = command.fade()
        assert first is not second

        first.type("in")
        assert second.values == {}

    def test_builder_unchanged_after_build(self, command):
        builder = command.fade().type("in")
        builder.build()
        builder.type("out")
        assert command.filters[0].options["type"] == "in"

    def test_later_set_replaces_earlier(self, command):
        command.fade().type("in").type("out").build()
        assert command.filters[0].options == {"type": "out"}

    def test_option_order_follows_first_set(self, command):
        command.crop().h(10).w(20).x(0).h(30).build()
        assert list(command.filters[0].options) == ["h", "w", "x"]

    def test_build_with_pads(self, command):
        command.hflip().build(inputs="0:v", outputs=["flipped"])
        descriptor = command.filters[0]
        assert descriptor.inputs == ("0:v",)
        assert descriptor.outputs == ("flipped",)


class TestSetters:
    """Generated setters, aliases and the generic set()."""

    def test_with_alias_sets_same_option(self, command):
        command.fade().with_type("in").with_start_time(1.5).build()
        assert command.filters[0].options == {"type": "in", "start_time": 1.5}

    def test_keyword_option_gets_underscore(self, command):
        command.atadenoise().in_(3).build()
        assert command.filters[0].options == {"in": 3}

    def test_non_identifier_option_only_through_with(self, command):
        builder = command.atadenoise()
        assert not hasattr(builder, "0a")
        builder.with_0a(0.02).build()
        assert command.filters[0].options == {"0a": 0.02}

    def test_set_by_name(self, command):
        command.atadenoise().set("0a", 0.1).set("s", 9).build()
        assert command.filters[0].options == {"0a": 0.1, "s": 9}

    def test_set_unknown_option_raises(self, command):
        with pytest.raises(FilterConfigError) as exc_info:
            command.fade().set("speed", 2)
        assert exc_info.value.filter_name == "fade"
        assert exc_info.value.option == "speed"
        assert "unknown option" in str(exc_info.value)

    def test_none_clears_option(self, command):
        builder = command.fade().type("in").start_frame(5)
        builder.start_frame(None)
        assert builder.values == {"type": "in"}
        assert not builder.is_set("start_frame")

    def test_unset(self, command):
        builder = command.fade().alpha(True).unset("alpha")
        assert builder.values == {}

    def test_values_is_a_copy(self, command):
        builder = command.fade().type("in")
        builder.values["type"] = "out"
        assert builder.values == {"type": "in"}

    def test_setter_docstring_from_description(self, registry):
        cls = registry.builder_class("fade")
        assert cls.__name__ == "FadeBuilder"
        assert issubclass(cls, FilterBuilder)
        assert cls.type.__doc__ == "Set the 'type' option."
        assert cls.with_type.__doc__ == "Alias for type()."


# ── Validation ────────────────────────────────────────────────────────


class TestValidation:
    """Typed options are checked on build() when strict."""

    def test_invalid_choice_raises_on_build(self, command):
        builder = command.fade().type("sideways")
        with pytest.raises(FilterConfigError) as exc_info:
            builder.build()
        assert exc_info.value.option == "type"
        assert command.filters == []

    def test_out_of_range_int(self, command):
        with pytest.raises(FilterConfigError, match="nb_frames"):
            command.fade().nb_frames(0).build()

    def test_bool_is_not_an_int(self, command):
        with pytest.raises(FilterConfigError, match="integer"):
            command.fade().start_frame(True).build()

    def test_required_option_missing(self, command):
        with pytest.raises(FilterConfigError, match="is required"):
            command.volume().precision("float").build()

    def test_required_option_present(self, command):
        command.volume().volume(0.5).build()
        assert command.filters[0].options == {"volume": 0.5}

    def test_non_strict_skips_validation(self, command):
        command.fade(strict=False).type("sideways").build()
        assert command.filters[0].options == {"type": "sideways"}

    def test_strict_default_from_config(self, monkeypatch, registry):
        monkeypatch.setenv("FFCHAIN_STRICT", "false")
        cmd = FFmpegCommand(registry=registry)
        cmd.fade().nb_frames(-3).build()
        assert cmd.filters[0].options == {"nb_frames": -3}

    def test_validate_without_build(self, command):
        builder = command.fade().color(255)
        with pytest.raises(FilterConfigError, match="color"):
            builder.validate()


# ── Class generation ──────────────────────────────────────────────────


class TestMakeBuilderClass:
    """make_builder_class() and setter naming."""

    def test_setter_name(self):
        assert setter_name("start_time") == "start_time"
        assert setter_name("in") == "in_"
        assert setter_name("0a") is None
        assert setter_name("build") is None

    def test_reserved_names_cover_public_api(self):
        for name in ("set", "unset", "is_set", "values", "validate", "build", "filter_spec"):
            assert name in RESERVED_NAMES

    def test_reserved_option_still_settable(self):
        spec = FilterSpec(name="odd", options=[OptionSpec(name="build"), OptionSpec(name="values")])
        cls = make_builder_class(spec)

        host = FFmpegCommand()
        builder = cls(host, strict=True)
        assert callable(builder.build)
        builder.set("build", 1).set("values", "a|b").build()
        assert host.filters[0].options == {"build": 1, "values": "a|b"}

    def test_filter_name_option_does_not_clash(self):
        spec = FilterSpec(name="zmq-like", options=[OptionSpec(name="filter_name")])
        cls = make_builder_class(spec)
        assert cls.__name__ == "ZmqLikeBuilder"

        host = FFmpegCommand()
        cls(host).filter_name("scale").build()
        assert host.filters[0].filter == "zmq-like"
        assert host.filters[0].options == {"filter_name": "scale"}

    def test_each_spec_gets_its_own_class(self, registry):
        fade_cls = registry.builder_class("fade")
        crop_cls = registry.builder_class("crop")
        assert fade_cls is not crop_cls
        assert not hasattr(crop_cls, "start_time")
        assert registry.builder_class("fade") is fade_cls

    def test_repr(self, command):
        assert repr(command.fade().type("in")) == "<FadeBuilder fade {'type': 'in'}>"
