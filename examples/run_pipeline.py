"""Demonstration of the generate, compile and load pipeline."""

from __future__ import annotations

import logging
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from codegen_harness import CodeGenerationHarness, HarnessConfig


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    harness = CodeGenerationHarness(
        HarnessConfig(schema_roots=[pathlib.Path(__file__).parent / "schema"])
    )
    loader = harness.generate_and_compile("address.json", "com.example", generate_builders=True)

    address = loader.new_instance("com.example.Address")
    address.with_street("1 Main Street").with_city("Springfield")

    print("Loaded from:", loader.root)
    print("Instance:", address)


if __name__ == "__main__":
    main()
