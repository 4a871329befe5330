#!/usr/bin/env python3
"""
Interactive helper that writes the .env file used by the Audio Assessment API.

Usage: python scripts/setup_env.py [path/to/.env]
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

Prompt = Callable[[str], str]

DEFAULT_PORT = "3000"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_MAX_FILE_SIZE_MB = "10"
DEFAULT_REGION = "us-east-1"


def mask_secret(value: str, visible: int = 4) -> str:
    """Show only the first characters of a credential."""

    if len(value) <= visible * 2:
        return "*" * len(value)
    return value[:visible] + "..."


def render_env(
    *,
    access_key: str,
    secret_key: str,
    region: str,
    port: str,
    environment: str,
    max_file_size_mb: int,
) -> str:
    return (
        "# AWS Configuration (Transcribe + Bedrock)\n"
        f"AWS_ACCESS_KEY_ID={access_key}\n"
        f"AWS_SECRET_ACCESS_KEY={secret_key}\n"
        f"AWS_REGION={region}\n"
        "\n"
        "# Server Configuration\n"
        f"PORT={port}\n"
        f"ENVIRONMENT={environment}\n"
        "\n"
        "# File Upload Configuration\n"
        f"MAX_FILE_SIZE={max_file_size_mb * 1024 * 1024}\n"
        "UPLOAD_PATH=./uploads\n"
    )


def run_setup(env_path: Path, ask: Prompt = input) -> bool:
    """Prompt for configuration values and write ``env_path``. Returns True when written."""

    print("AI Audio Assessment System Setup\n")
    print("This script will help you configure your environment variables.\n")

    if env_path.exists():
        overwrite = ask(f"A {env_path.name} file already exists. Do you want to overwrite it? (y/N): ")
        if overwrite.strip().lower() not in ("y", "yes"):
            print(f"Setup cancelled. Your existing {env_path.name} file has been preserved.")
            return False

    access_key = ask("Enter your AWS access key id: ").strip()
    secret_key = ask("Enter your AWS secret access key: ").strip()
    if not access_key or not secret_key:
        print("AWS credentials are required!")
        return False

    region = ask(f"Enter AWS region (default: {DEFAULT_REGION}): ").strip() or DEFAULT_REGION
    port = ask(f"Enter server port (default: {DEFAULT_PORT}): ").strip() or DEFAULT_PORT
    environment = (
        ask(f"Enter environment (development/production, default: {DEFAULT_ENVIRONMENT}): ").strip()
        or DEFAULT_ENVIRONMENT
    )
    max_size_raw = (
        ask(f"Enter max audio file size in MB (default: {DEFAULT_MAX_FILE_SIZE_MB}): ").strip()
        or DEFAULT_MAX_FILE_SIZE_MB
    )
    try:
        max_file_size_mb = int(max_size_raw)
    except ValueError:
        print(f"Invalid size '{max_size_raw}', using {DEFAULT_MAX_FILE_SIZE_MB}MB.")
        max_file_size_mb = int(DEFAULT_MAX_FILE_SIZE_MB)

    env_path.write_text(
        render_env(
            access_key=access_key,
            secret_key=secret_key,
            region=region,
            port=port,
            environment=environment,
            max_file_size_mb=max_file_size_mb,
        ),
        encoding="utf-8",
    )

    print("\nConfiguration completed successfully!")
    print("\nNext steps:")
    print("1. Run: python run.py")
    print(f"2. Send: POST http://localhost:{port}/api/assessment")
    print(f"\nConfiguration saved to {env_path}:")
    print(f"- AWS access key: {mask_secret(access_key)}")
    print(f"- AWS region: {region}")
    print(f"- Server port: {port}")
    print(f"- Environment: {environment}")
    print(f"- Max file size: {max_file_size_mb}MB")
    return True


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(".env")
    try:
        run_setup(target)
    except (KeyboardInterrupt, EOFError):
        print("\nSetup aborted.")
        sys.exit(1)
