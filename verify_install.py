#!/usr/bin/env python3
"""Quick verification script to test package installation."""

import sys


def main():
    """Verify the transport_solver package is properly installed."""
    print("=" * 60)
    print("Transportation Solver - Installation Verification")
    print("=" * 60)

    print("\n[1/4] Testing package import...")
    try:
        import transport_solver

        print("    ✓ Package imported successfully")
        print(f"    ✓ Version: {transport_solver.__version__}")
    except ImportError as e:
        print(f"    ✗ Failed to import package: {e}")
        return 1

    print("\n[2/4] Testing API exports...")
    try:
        from transport_solver import build_problem, solve_transportation, step_once  # noqa: F401

        print(f"    ✓ {len(transport_solver.__all__)} public names available")
    except ImportError as e:
        print(f"    ✗ Failed to import APIs: {e}")
        return 1

    print("\n[3/4] Testing dependencies...")
    try:
        import numpy as np

        print(f"    ✓ NumPy {np.__version__}")
    except ImportError as e:
        print(f"    ✗ Missing dependency: {e}")
        return 1

    print("\n[4/4] Testing solver with a 2x2 problem...")
    try:
        problem = build_problem([[4, 6], [8, 2]], supply=[10, 10], demand=[12, 8])
        result = solve_transportation(problem)

        if result.status == "optimal" and abs(result.objective - 72.0) < 1e-9:
            print("    ✓ Solver works correctly")
            print(f"    ✓ Status: {result.status}, Objective: {result.objective}")
        else:
            print(f"    ✗ Unexpected result: {result.status}, {result.objective}")
            return 1
    except Exception as e:
        print(f"    ✗ Solver test failed: {e}")
        import traceback

        traceback.print_exc()
        return 1

    print("\n" + "=" * 60)
    print("✓ All checks passed! Package is ready to use.")
    print("=" * 60)
    print("\nTry running an example:")
    print("    python examples/solve_example.py")
    print("\nOr run the test suite:")
    print("    pytest")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
