#!/usr/bin/env python3
"""
Pinna - Run Script
Starts the FastAPI server that fronts the place catalog engine
"""

import os
import sys
import subprocess
from pathlib import Path

def print_colored(message, color="blue"):
    """Print colored output"""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "reset": "\033[0m"
    }
    print(f"{colors.get(color, '')}{message}{colors['reset']}")

def check_file_exists(filepath, error_message):
    """Check if a file exists"""
    if not Path(filepath).exists():
        print_colored(f"❌ Error: {error_message}", "red")
        sys.exit(1)

def check_catalog_reachable(base_url, timeout=5.0):
    """Check whether the remote catalog answers at all"""
    import httpx
    try:
        httpx.get(base_url, timeout=timeout)
        return True
    except httpx.HTTPError:
        return False

def main():
    print_colored("🚀 Starting Pinna...", "blue")

    check_file_exists("pinna/main.py", "pinna/main.py not found. Please run this script from the project root.")

    if not Path(".env").exists():
        print_colored("⚠️  No .env file found, using defaults.", "yellow")
        print("Settings you may want to override:")
        print("  CATALOG_BASE_URL=https://pinna-api.onrender.com")
        print("  UPLOAD_MODE=multipart")
        print("  TAP_TOLERANCE_DEGREES=0.0005")
        print("  LOGGER=20")

    print_colored("🔍 Checking dependencies...", "blue")
    try:
        import fastapi
        import uvicorn
    except ImportError:
        print_colored("❌ Dependencies not installed.", "red")
        print("Install them with:  pip install -e .")
        sys.exit(1)

    from pinna.core.config import settings

    print_colored("🔍 Checking catalog connection...", "blue")
    if not check_catalog_reachable(settings.CATALOG_BASE_URL):
        print_colored(f"⚠️  Warning: catalog at {settings.CATALOG_BASE_URL} is not reachable", "yellow")
        print("Places will show as FAILED until it comes back; refresh is manual.")
        print()

    port = os.environ.get("PORT", "8000")
    print_colored("✅ All checks passed!", "green")
    print_colored("🌐 Starting Uvicorn server...", "blue")
    print(f"📍 API will be available at: http://localhost:{port}")
    print(f"📍 Health check: http://localhost:{port}/health")
    print(f"📍 API Documentation: http://localhost:{port}/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print()

    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "pinna.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", port
        ], check=True)
    except KeyboardInterrupt:
        print_colored("\n👋 Server stopped.", "yellow")
    except subprocess.CalledProcessError as e:
        print_colored(f"\n❌ Error starting server: {e}", "red")
        sys.exit(1)

if __name__ == "__main__":
    main()
