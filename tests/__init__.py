"""Test suite for the COFF DWARF Mapper.

Test Structure:
- domain/: container parsing, type graph building, resolution and map output
- infrastructure/: logging and the pyelftools debug-info adapter
- application/: the generator pipeline and the command line
- config/: configuration management

Run tests with pytest:
    pytest                    # Run all tests
    pytest -m unit            # Run unit tests only
    pytest -m integration     # Run tests that decode DWARF through pyelftools
"""
