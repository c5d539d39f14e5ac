#!/usr/bin/env python3
"""
Python-based startup script for the Brief Evaluator API.
"""

import os
import subprocess
import sys

from dotenv import load_dotenv


def main():
    """Main entry point."""
    print("=" * 60)
    print("Brief Evaluator API Server")
    print("=" * 60)

    load_dotenv()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    workers = int(os.getenv("WORKERS", "1"))

    api_key_set = bool(os.getenv("BRIEFEVAL_LLM_API_KEY") or os.getenv("OPENAI_API_KEY"))

    print(f"\nConfiguration:")
    print(f"  Host: {host}")
    print(f"  Port: {port}")
    print(f"  Workers: {workers}")
    print(f"  LLM model: {os.getenv('BRIEFEVAL_LLM_MODEL') or 'gpt-4o'}")
    print(f"  API key: {'set' if api_key_set else 'MISSING'}")

    if not api_key_set:
        print("\nBRIEFEVAL_LLM_API_KEY (or OPENAI_API_KEY) is required; refusing to start.")
        sys.exit(1)

    print(f"\nAPI Documentation: http://localhost:{port}/docs")
    print("=" * 60)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "app:app",
        "--host", host,
        "--port", str(port),
    ]

    if workers == 1:
        cmd.append("--reload")
    else:
        cmd.extend(["--workers", str(workers)])

    try:
        subprocess.run(cmd)
    except KeyboardInterrupt:
        print("\n\nShutting down server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
