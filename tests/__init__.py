"""
trapcycle Test Suite.

This package contains pytest tests for the trapcycle task engine. Tests are
organized by module:

    test_geometry.py    - Coordinate and Zone tests
    test_placement.py   - Placement strategy family and factory tests
    test_state.py       - TrapStateManager ledger tests
    test_tasks.py       - TaskManager scheduling tests
    test_hunting.py     - Hunting task cycle tests
    test_drop.py        - DropTask tests
    test_config.py      - HuntingConfig dataclass tests
    test_sim.py         - End-to-end runs against SimulatedWorld
    test_cli.py         - Command-line interface tests

Fixtures are defined in conftest.py and shared across all test modules.
"""
