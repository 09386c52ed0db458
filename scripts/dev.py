#!/usr/bin/env python3
"""Local development runner.

Usage:
    python scripts/dev.py [--host HOST] [--port PORT] [--reload] [--reseed]

Optionally reloads the bundled content, then runs uvicorn in a child process
and stops it cleanly on Ctrl+C / SIGTERM.
"""

import argparse
import signal
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def reseed() -> int:
    """Replace database content with the bundled JSON posts."""
    cmd = [sys.executable, "-m", "folio.seed", "--force"]
    return subprocess.call(cmd, cwd=PROJECT_ROOT)


def uvicorn_command(host: str, port: int, reload: bool) -> list:
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "folio.main:app",
        "--host",
        host,
        "--port",
        str(port),
    ]
    if reload:
        cmd += [
            "--reload",
            "--reload-dir",
            str(PROJECT_ROOT / "src"),
            "--reload-exclude",
            "*.db",
        ]
    return cmd


def run_server(host: str, port: int, reload: bool) -> int:
    """Run uvicorn until it exits or we are signalled.

    Returns:
        Exit code from the server process
    """
    print(f"Folio dev server on http://{host}:{port} (reload {'on' if reload else 'off'})")
    process = subprocess.Popen(uvicorn_command(host, port, reload), cwd=PROJECT_ROOT)

    def stop(signum, frame):
        print("\nStopping server...")
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, stop)
    signal.signal(signal.SIGTERM, stop)
    return process.wait()


def main():
    parser = argparse.ArgumentParser(description="Run the Folio development server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument(
        "--reseed",
        action="store_true",
        help="Replace database content with the bundled posts first",
    )
    args = parser.parse_args()

    if args.reseed and reseed() != 0:
        sys.exit("Reseed failed")

    sys.exit(run_server(args.host, args.port, args.reload))


if __name__ == "__main__":
    main()
