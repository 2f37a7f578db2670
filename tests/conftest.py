"""Pytest configuration and shared fixtures."""

import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from coff_dwarf_mapper.domain.models.dwarf import TypeCollection
from coff_dwarf_mapper.domain.services.parsing import LocationEvaluator, Mapper
from coff_dwarf_mapper.infrastructure.logging import LoggerSetup

from tests.builders import (
    FakeSource,
    base_type,
    compile_unit,
    member,
    plus_uconst_expression,
    structure,
    variable,
)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def evaluator() -> LocationEvaluator:
    """Evaluator for 4-byte little-endian DWARF 4 units."""
    return LocationEvaluator.for_encoding()


@pytest.fixture
def scenario_source() -> FakeSource:
    """
    The reference tree: base type "int" at 10, structure at 20 with member
    "x" of type 10 at byte offset 0, and global "g" of type 20 at 0x1000.
    """
    return FakeSource(
        compile_unit(
            base_type(10, "int"),
            structure(20, None, member(21, "x", 10, plus_uconst_expression(0))),
            variable(30, "g", 20, 0x1000),
        )
    )


@pytest.fixture
def scenario_types(scenario_source: FakeSource) -> TypeCollection:
    """Type graph collected from the reference tree."""
    return Mapper().process(scenario_source)


@pytest.fixture
def clean_logging() -> Generator[None, None, None]:
    """Reset global logging state around a test."""
    LoggerSetup.reset()
    yield
    LoggerSetup.reset()
    logging.getLogger().setLevel(logging.WARNING)
