#!/usr/bin/env python3
"""
Development tasks for sieveql.

    python dev_tasks.py <format|lint|test|build|install-dev|clean|all>
"""

import os
import shutil
import subprocess
import sys

SOURCES = "sieveql tests examples"


def run_command(command, check=True):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", ".mypy_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    print("Formatting code...")
    run_command(f"black {SOURCES}")
    run_command(f"isort {SOURCES}")


def lint():
    print("Running linting...")
    ok = run_command("mypy sieveql", check=False)
    ok = run_command(f"flake8 {SOURCES}", check=False) and ok
    if not ok:
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    print("Running tests...")
    if not run_command("pytest tests/ -v --cov=sieveql --cov-report=term-missing", check=False):
        sys.exit(1)


def build():
    clean()
    run_command("python -m build")


def install_dev():
    run_command("pip install -e .[dev,test]")


COMMANDS = {
    "clean": clean,
    "format": format_code,
    "lint": lint,
    "test": test,
    "build": build,
    "install-dev": install_dev,
    "all": lambda: (format_code(), lint(), test()),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print("Usage: python dev_tasks.py <command>")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)
    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
