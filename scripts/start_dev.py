#!/usr/bin/env python3
"""
Development startup script.

Starts the cart backend in development mode.
"""

import os
import sys
import shutil
import subprocess
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import jwt
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def check_env():
    """Check if .env file exists, creating it from the example if needed."""
    env_file = PROJECT_ROOT / "config" / ".env"
    env_example = PROJECT_ROOT / "config" / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created config/.env from example")
        print("  Please edit config/.env with your settings")
        return True
    else:
        print("✗ No configuration file found")
        return False


def start_backend():
    """Start the cart backend in development mode."""
    pythonpath = os.pathsep.join(
        [str(PROJECT_ROOT / "shared"), str(PROJECT_ROOT / "cart-backend")]
    )

    print("\n🛒 Starting Cart Backend on http://localhost:8001 ...")
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "cart_backend.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", "8001",
        ],
        cwd=PROJECT_ROOT,
        env={**os.environ, "PYTHONPATH": pythonpath},
    )

    print("\n" + "=" * 60)
    print("📍 Cart Backend: http://localhost:8001")
    print("📍 API docs:     http://localhost:8001/docs")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Cart Backend stopped.")


def main():
    print("=" * 60)
    print("Storefront Cart - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        sys.exit(1)

    print("\n✓ All checks passed!")
    start_backend()


if __name__ == "__main__":
    main()
