"""Post-clone environment setup helper.

Run once after creating the env and installing the package:

    python -m venv .venv && . .venv/bin/activate
    pip install -e ".[test]"
    python setup_env.py

This script:
1. Verifies all required imports resolve correctly.
2. Verifies the package modules import cleanly.
3. Checks that config.yaml loads and validates.
"""

import sys


def verify_imports() -> None:
    print("Verifying core imports...")
    required = [
        ("pandas", "pandas"),
        ("requests", "requests"),
        ("yaml", "PyYAML"),
        ("dotenv", "python-dotenv"),
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
    ]
    all_ok = True
    for mod, pkg in required:
        try:
            __import__(mod)
            print(f"  [OK] {pkg}")
        except ImportError:
            print(f"  [MISSING] {pkg}  →  run: pip install {pkg}")
            all_ok = False

    if not all_ok:
        print("\nSome packages are missing. Run:  pip install -e .")
        sys.exit(1)


def verify_pipeline_imports() -> None:
    print("\nVerifying pipeline source imports...")
    try:
        from signal_archive.pipeline.engine import PipelineEngine  # noqa: F401
        from signal_archive.api.app import create_app  # noqa: F401
        print("  [OK] All pipeline modules import cleanly.")
    except Exception as exc:
        print(f"  [ERROR] Pipeline import failed: {exc}")
        sys.exit(1)


def verify_config() -> None:
    print("\nVerifying config.yaml...")
    from signal_archive.core.config import PipelineConfig, load_config
    try:
        config = PipelineConfig.from_dict(load_config())
    except Exception as exc:
        print(f"  [ERROR] {exc}")
        sys.exit(1)
    print(f"  [OK] sources={config.sources_dir}  archive={config.archive_path}")


if __name__ == "__main__":
    print("=" * 60)
    print("  Signal Archive — Environment Setup Check")
    print("=" * 60)
    verify_imports()
    verify_pipeline_imports()
    verify_config()
    print("\n" + "=" * 60)
    print("  Setup complete. You can now run: python run_pipeline.py")
    print("=" * 60)
