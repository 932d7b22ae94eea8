"""Tests for plugin types and the declaration context."""

import pytest

from hostfacts.exceptions import IllegalPluginDefinition, InvalidPluginName
from hostfacts.plugins.declaration import CURRENT_SCHEMA_VERSION
from hostfacts.plugins.dsl import DeclarationContext, LegacyPlugin, Plugin


@pytest.fixture
def context():
    return DeclarationContext()


class TestPluginDecorator:
    """Test declaring plugin types."""

    def test_creates_plugin_type(self, context):
        @context.plugin("Kernel", provides=["kernel", "kernel/release"])
        class Kernel:
            depends = ["os"]

            def helper(self):
                return "help"

        assert issubclass(Kernel, Plugin)
        assert Kernel.plugin_name == "Kernel"
        assert Kernel.schema_version == CURRENT_SCHEMA_VERSION
        assert Kernel.provides_attrs == ["kernel", "kernel/release"]
        assert Kernel.depends_attrs == ["os"]
        assert Kernel.sources == []
        assert Kernel({}).helper() == "help"
        assert len(context) == 1

    def test_provides_from_keyword_and_body_are_merged(self, context):
        @context.plugin("Network", provides="network")
        class Network:
            provides = ("network/interfaces", "network")

        assert Network.provides_attrs == ["network", "network/interfaces"]

    def test_reopening_returns_same_type(self, context):
        @context.plugin("Cpu", provides=["cpu"])
        class First:
            @context.collect_data()
            def collect_default(self):
                self.data["cpu"] = "default"

        @context.plugin("Cpu", provides=["cpu", "cpu/total"])
        class Second:
            depends = ["kernel"]

            @context.collect_data("linux", "darwin")
            def collect_unix(self):
                self.data["cpu"] = "unix"

        assert First is Second
        assert First.provides_attrs == ["cpu", "cpu/total"]
        assert First.depends_attrs == ["kernel"]
        assert set(First.collectors) == {"default", "linux", "darwin"}
        assert len(context) == 1

    def test_schema_is_part_of_identity(self, context):
        @context.plugin("Uptime", schema=1)
        class Legacy:
            pass

        @context.plugin("Uptime")
        class Current:
            pass

        assert Legacy is not Current
        assert issubclass(Legacy, LegacyPlugin)
        assert issubclass(Current, Plugin)
        assert context.get("Uptime", schema=1) is Legacy
        assert context.get("Uptime") is Current

    def test_invalid_name(self, context):
        with pytest.raises(InvalidPluginName, match="capital letter"):

            @context.plugin("kernel")
            class Kernel:
                pass

    def test_non_string_name(self, context):
        with pytest.raises(InvalidPluginName):

            @context.plugin(42)
            class Kernel:
                pass

    def test_unknown_schema(self, context):
        with pytest.raises(IllegalPluginDefinition, match="unknown plugin schema version 9"):

            @context.plugin("Kernel", schema=9)
            class Kernel:
                pass

    def test_malformed_attribute(self, context):
        with pytest.raises(IllegalPluginDefinition, match="duplicate '/'"):

            @context.plugin("Kernel", provides=["kernel//release"])
            class Kernel:
                pass

    def test_provides_must_be_strings(self, context):
        with pytest.raises(IllegalPluginDefinition, match="provides must be"):

            @context.plugin("Kernel", provides=7)
            class Kernel:
                pass

    def test_base_classes_rejected(self, context):
        with pytest.raises(IllegalPluginDefinition, match="cannot declare base classes"):

            @context.plugin("Kernel")
            class Kernel(dict):
                pass

    def test_failed_declaration_leaves_no_type(self, context):
        with pytest.raises(IllegalPluginDefinition):

            @context.plugin("Kernel", provides=["kernel/"])
            class Kernel:
                pass

        assert context.get("Kernel") is None

    @pytest.mark.parametrize("field", ["sources", "provides_attrs", "collectors", "plugin_name"])
    def test_plugin_fields_cannot_be_defined(self, context, field):
        with pytest.raises(IllegalPluginDefinition, match=f"cannot define {field}"):
            context.plugin("Kernel")(type("Kernel", (), {field: None}))

        assert context.get("Kernel") is None

    def test_reopen_cannot_redefine_plugin_fields(self, context):
        @context.plugin("Kernel", provides=["kernel"])
        class Kernel:
            pass

        with pytest.raises(IllegalPluginDefinition, match="cannot define sources"):

            @context.plugin("Kernel")
            class Again:
                sources = ()

        assert Kernel.sources == []
        assert Kernel.provides_attrs == ["kernel"]


class TestStaged:
    """Test tentative declarations."""

    def test_changes_kept_on_success(self, context):
        with context.staged():

            @context.plugin("Kernel")
            class Kernel:
                pass

        assert context.get("Kernel") is Kernel

    def test_new_type_forgotten_on_failure(self, context):
        with pytest.raises(RuntimeError):
            with context.staged():

                @context.plugin("Kernel")
                class Kernel:
                    pass

                raise RuntimeError("later failure")

        assert context.get("Kernel") is None
        assert len(context) == 0

    def test_reopened_type_restored_on_failure(self, context):
        @context.plugin("Cpu", provides=["cpu"])
        class Cpu:
            cores = 4

            @context.collect_data()
            def collect_default(self):
                pass

        with pytest.raises(RuntimeError):
            with context.staged():

                @context.plugin("Cpu", provides=["cpu/total"], depends=["kernel"])
                class Again:
                    cores = 8
                    vendor = "acme"

                    @context.collect_data("linux")
                    def collect_linux(self):
                        pass

                raise RuntimeError("later failure")

        assert context.get("Cpu") is Cpu
        assert Cpu.provides_attrs == ["cpu"]
        assert Cpu.depends_attrs == []
        assert set(Cpu.collectors) == {"default"}
        assert Cpu.cores == 4
        assert not hasattr(Cpu, "vendor")
        assert not hasattr(Cpu, "collect_linux")

    def test_nested_blocks_join_the_outer_one(self, context):
        with pytest.raises(RuntimeError):
            with context.staged():
                with context.staged():

                    @context.plugin("Kernel")
                    class Kernel:
                        pass

                raise RuntimeError("outer failure")

        assert context.get("Kernel") is None


class TestCollectors:
    """Test collector lookup on plugin instances."""

    def test_platform_collector_preferred(self, context):
        @context.plugin("Os", provides=["os"])
        class Os:
            @context.collect_data()
            def collect_default(self):
                self.data["os"] = "unknown"

            @context.collect_data("linux")
            def collect_linux(self):
                self.data["os"] = "linux"

        data = {}
        plugin = Os(data)
        plugin.collector("linux")()
        assert data == {"os": "linux"}

        plugin.collector("windows")()
        assert data == {"os": "unknown"}

    def test_no_collector(self, context):
        @context.plugin("Empty")
        class Empty:
            pass

        assert Empty({}).collector("linux") is None

    def test_invalid_platform(self, context):
        with pytest.raises(IllegalPluginDefinition, match="non-empty strings"):
            context.collect_data("")


def test_repr(context):
    @context.plugin("Kernel")
    class Kernel:
        pass

    assert repr(Kernel({})) == f"<Kernel plugin v{CURRENT_SCHEMA_VERSION}>"
