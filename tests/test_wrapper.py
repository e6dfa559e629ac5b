"""End-to-end tests for protowrap.wrapper with protoc faked out."""

from __future__ import annotations

import io
import threading

import pytest

from protowrap.errors import ConfigurationError, CycleError, GenerationError, ProtowrapError
from protowrap.models import PackageUnit
from protowrap.protoc import DescriptorCollector
from protowrap.wrapper import Wrapper
from tests._fixtures.proto_builder import ProtoTreeBuilder


class RecordingGenerate:
    def __init__(self, fail: set[str] | None = None) -> None:
        self.fail = fail or set()
        self.packages: list[PackageUnit] = []
        self._lock = threading.Lock()

    def __call__(self, package: PackageUnit) -> None:
        with self._lock:
            self.packages.append(package)
        if package.computed_package in self.fail:
            raise GenerationError(f"cannot generate {package.computed_package}", package=package.computed_package)


def _wrapper(proto_tree: ProtoTreeBuilder, protos: list[str], **kwargs) -> Wrapper:
    generate = kwargs.pop("generate", None) or RecordingGenerate()
    wrapper = Wrapper(
        import_dirs=kwargs.pop("import_dirs", ["."]),
        proto_files=protos,
        protoc_flags=["-I.", "--go_out=out"],
        collector=DescriptorCollector(runner=proto_tree.runner),
        generator_factory=lambda _: generate,
        **kwargs,
    )
    wrapper.recorded = generate  # type: ignore[attr-defined]
    return wrapper


def test_same_package_files_generate_together(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a.proto", package="p", imports=["b.proto"])
    proto_tree.add("b.proto", package="p")
    wrapper = _wrapper(proto_tree, ["a.proto", "b.proto"])

    graph = wrapper.init()
    wrapper.check_cycles()
    wrapper.generate()

    assert list(graph.packages) == [".;p"]
    (package,) = wrapper.recorded.packages
    assert package.computed_package == ".;p"
    assert package.member_paths() == ["a.proto", "b.proto"]


def test_mutual_imports_across_packages_are_a_cycle(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("x.proto", package="x", imports=["y.proto"])
    proto_tree.add("y.proto", package="y", imports=["x.proto"])
    wrapper = _wrapper(proto_tree, ["x.proto", "y.proto"])
    wrapper.init()

    with pytest.raises(CycleError) as excinfo:
        wrapper.check_cycles()

    assert "x.proto imports y.proto" in excinfo.value.explanation
    assert "y.proto imports x.proto" in excinfo.value.explanation


def test_sibling_files_are_collected_unless_only_specified(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a.proto", package="p")
    proto_tree.add("other/c.proto", package="c")

    expanded = _wrapper(proto_tree, ["a.proto"])
    expanded.init()
    assert expanded.all_protos == ["a.proto", "other/c.proto"]
    assert "--include_imports" in proto_tree.calls[-1]
    assert proto_tree.calls[-1][-2:] == ["a.proto", "other/c.proto"]

    only = _wrapper(proto_tree, ["a.proto"], no_expand=True)
    only.init()
    assert only.all_protos == ["a.proto"]
    assert proto_tree.calls[-1][-1] == "a.proto"


def test_dependency_only_packages_are_not_generated(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a.proto", package="p", imports=["dep/d.proto"])
    proto_tree.add("dep/d.proto", package="d")
    wrapper = _wrapper(proto_tree, ["a.proto"])

    graph = wrapper.init()
    wrapper.generate()

    assert sorted(graph.packages) == [".;p", "dep;d"]
    assert [pkg.computed_package for pkg in wrapper.recorded.packages] == [".;p"]


def test_generation_failure_is_raised(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a/a.proto", package="a")
    proto_tree.add("b/b.proto", package="b")
    wrapper = _wrapper(
        proto_tree,
        ["a/a.proto", "b/b.proto"],
        parallelism=2,
        generate=RecordingGenerate(fail={"b;b"}),
    )
    wrapper.init()

    with pytest.raises(GenerationError, match="cannot generate b;b"):
        wrapper.generate()


def test_print_structure(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a.proto", package="p", imports=["dep/d.proto", "google/protobuf/empty.proto"])
    proto_tree.add("dep/d.proto", package="d")
    proto_tree.add("google/protobuf/empty.proto", package="google.protobuf", on_disk=False)
    wrapper = _wrapper(proto_tree, ["a.proto"], no_expand=True)
    stream = io.StringIO()

    wrapper.print_structure(stream)
    wrapper.init()
    wrapper.print_structure(stream)

    assert stream.getvalue().splitlines() == [
        "[Not initialized]",
        "> Structure:",
        "> .;p",
        ">   files:",
        ">     a.proto (a.proto)",
        ">   deps:",
        ">     dep/d.proto",
        ">     google/protobuf/empty.proto",
    ]


def test_operations_require_init(proto_tree: ProtoTreeBuilder) -> None:
    wrapper = _wrapper(proto_tree, ["a.proto"])

    with pytest.raises(ProtowrapError):
        wrapper.check_cycles()
    with pytest.raises(ProtowrapError):
        wrapper.generate()


@pytest.mark.parametrize(
    ("import_dirs", "protos", "match"),
    [
        ([], ["a.proto"], "at least one import directory"),
        (["missing"], ["a.proto"], "Nonexistent import directory"),
        (["a.proto"], ["a.proto"], "Non-directory import directory"),
        (["."], [], "at least one input"),
        (["."], ["a.txt"], "non-proto input file"),
        (["sub"], ["a.proto"], "lexicographical prefix"),
        (["."], ["nope.proto"], "does not exist"),
    ],
)
def test_init_validates_configuration(
    proto_tree: ProtoTreeBuilder, import_dirs: list[str], protos: list[str], match: str
) -> None:
    proto_tree.add("a.proto", package="p")
    (proto_tree.root / "sub").mkdir()
    wrapper = _wrapper(proto_tree, protos, import_dirs=import_dirs)

    with pytest.raises(ConfigurationError, match=match):
        wrapper.init()

    assert proto_tree.calls == []


def test_init_rejects_non_positive_parallelism(proto_tree: ProtoTreeBuilder) -> None:
    proto_tree.add("a.proto", package="p")
    wrapper = _wrapper(proto_tree, ["a.proto"], parallelism=0)

    with pytest.raises(ConfigurationError, match="parallelism"):
        wrapper.init()
