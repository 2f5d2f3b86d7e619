import shutil
import tempfile
import unittest
from pathlib import Path

from codegen_harness import (
    BuildContext,
    CleanupRegistry,
    CodeGenerationHarness,
    DependencyResolutionError,
    GenerationError,
    GeneratorExecutionError,
    HarnessConfig,
    SchemaNotFoundError,
)

SCHEMA_PATH = Path(__file__).parent / "data" / "schema"


class RecordingBuildContext(BuildContext):
    def __init__(self) -> None:
        self.calls = 0

    def compile_classpath_elements(self):
        self.calls += 1
        return []


class UnresolvableBuildContext(BuildContext):
    def compile_classpath_elements(self):
        raise DependencyResolutionError("compile scope has not been resolved")


class GenerateTest(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_root = Path(tempfile.mkdtemp(prefix="generate-test-"))
        self.addCleanup(shutil.rmtree, self.temp_root, True)
        self.registry = CleanupRegistry()

    def _harness(self, **kwargs) -> CodeGenerationHarness:
        config = HarnessConfig(temp_root=self.temp_root, schema_roots=[SCHEMA_PATH])
        return CodeGenerationHarness(config, registry=self.registry, **kwargs)

    def test_generate_produces_a_non_empty_workspace(self) -> None:
        output = self._harness().generate("address.json", "com.example")

        self.assertTrue(output.is_dir())
        self.assertEqual(output.parent, self.temp_root)
        package = output / "com" / "example"
        self.assertTrue((output / "com" / "__init__.py").is_file())
        self.assertTrue((package / "address.py").is_file())
        self.assertIn("from .address import Address", (package / "__init__.py").read_text())

    def test_successive_runs_use_distinct_workspaces(self) -> None:
        harness = self._harness()

        first = harness.generate("address.json", "com.example")
        second = harness.generate("address.json", "com.example")

        self.assertNotEqual(first, second)
        self.assertEqual(self.registry.pending(), 2)

    def test_missing_schema_fails_before_any_workspace_exists(self) -> None:
        with self.assertRaises(SchemaNotFoundError):
            self._harness().generate("no-such-schema.json", "com.example")

        self.assertEqual(list(self.temp_root.iterdir()), [])
        self.assertEqual(self.registry.pending(), 0)

    def test_schema_names_resolve_like_classpath_resources(self) -> None:
        harness = self._harness()

        from_root = harness.generate("/address.json", "com.example")
        absolute = harness.generate(str(SCHEMA_PATH / "address.json"), "com.example")
        as_url = harness.generate((SCHEMA_PATH / "address.json").resolve().as_uri(), "com.example")

        for output in (from_root, absolute, as_url):
            self.assertTrue((output / "com" / "example" / "address.py").is_file())

    def test_unsupported_location_is_a_generation_error(self) -> None:
        with self.assertRaises(GenerationError) as raised:
            self._harness().generate("https://example.com/address.json", "com.example")

        self.assertIsInstance(raised.exception.__cause__, ValueError)
        self.assertEqual(self.registry.pending(), 1)

    def test_malformed_schema_is_a_generation_error(self) -> None:
        with self.assertRaises(GenerationError) as raised:
            self._harness().generate("invalid.json", "com.example")

        self.assertIsInstance(raised.exception.__cause__, GeneratorExecutionError)

    def test_non_object_root_is_a_generation_error(self) -> None:
        with self.assertRaises(GenerationError):
            self._harness().generate("array_root.json", "com.example")

    def test_invalid_target_package_is_a_generation_error(self) -> None:
        for package in ("", "com.class", "com..example", "3d.models"):
            with self.subTest(package=package):
                with self.assertRaises(GenerationError):
                    self._harness().generate("address.json", package)

    def test_classpath_resolution_failure_is_a_generation_error(self) -> None:
        harness = self._harness(build_context=UnresolvableBuildContext())

        with self.assertRaises(GenerationError) as raised:
            harness.generate("address.json", "com.example")

        self.assertIsInstance(raised.exception.__cause__, DependencyResolutionError)

    def test_generator_consults_the_build_context(self) -> None:
        context = RecordingBuildContext()

        self._harness(build_context=context).generate("address.json", "com.example")

        self.assertEqual(context.calls, 1)

    def _write_schema(self, name: str, content: str) -> Path:
        schema_dir = Path(tempfile.mkdtemp(prefix="schema-fixture-"))
        self.addCleanup(shutil.rmtree, schema_dir, True)
        target = schema_dir / name
        target.write_text(content, encoding="utf-8")
        return target

    def test_non_string_property_type_is_a_generation_error(self) -> None:
        for kind in ('{"x": 1}', "[[]]", "3"):
            with self.subTest(kind=kind):
                schema = self._write_schema(
                    "odd.json",
                    '{"type": "object", "properties": {"a": {"type": %s}}}' % kind,
                )

                with self.assertRaises(GenerationError) as raised:
                    self._harness().generate(str(schema), "com.example")

                self.assertIsInstance(raised.exception.__cause__, GeneratorExecutionError)

    def test_non_finite_default_is_a_generation_error(self) -> None:
        for value in ("Infinity", "-Infinity", "NaN"):
            with self.subTest(value=value):
                schema = self._write_schema(
                    "limits.json",
                    '{"type": "object", "properties": {"ceiling": {"type": "number", "default": %s}}}'
                    % value,
                )

                with self.assertRaises(GenerationError) as raised:
                    self._harness().generate(str(schema), "com.example")

                self.assertIsInstance(raised.exception.__cause__, GeneratorExecutionError)

    def test_directory_sources_generate_every_schema(self) -> None:
        output = self._harness().generate("types", "org.geometry")

        package = output / "org" / "geometry"
        self.assertEqual(
            sorted(path.name for path in package.glob("*.py")),
            ["__init__.py", "point.py", "point1.py", "segment.py"],
        )


if __name__ == "__main__":
    unittest.main()
