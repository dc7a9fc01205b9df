#!/usr/bin/env python3
"""
Bulk-upload a directory of images to a running image host.

Logs in with the admin password, then uploads every supported file one at
a time, the same way the browser uploader does.

Usage:
    python scripts/upload_images.py ./photos --url http://localhost:8000 --webp --quality 75

Requires:
    - ADMIN_PASSWORD in the environment or a .env file (or --password)
"""

import mimetypes
import os
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SUPPORTED_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"}


def find_images(directory: Path, recursive: bool = False) -> list[tuple[Path, str]]:
    """Return (path, mime type) for each supported image, sorted by path."""
    pattern = "**/*" if recursive else "*"
    found = []
    for path in sorted(directory.glob(pattern)):
        if not path.is_file():
            continue
        mime_type, _ = mimetypes.guess_type(path.name)
        if path.suffix.lower() == ".webp":
            mime_type = "image/webp"
        if mime_type in SUPPORTED_TYPES:
            found.append((path, mime_type))
    return found


def upload_all(
    base_url: str,
    password: str,
    images: list[tuple[Path, str]],
    webp: bool = False,
    quality: int = 80,
    hash_names: bool = False,
) -> tuple[int, int]:
    """Upload each image sequentially. Returns (uploaded, errors)."""
    uploaded = 0
    errors = 0

    with httpx.Client(base_url=base_url, timeout=60.0) as client:
        login = client.post("/api/auth/login", json={"password": password})
        if login.status_code != 200:
            print(f"ERROR: Login failed ({login.status_code}): {login.text}")
            return 0, len(images)

        for path, mime_type in images:
            with path.open("rb") as f:
                response = client.post(
                    "/api/upload",
                    files={"file": (path.name, f, mime_type)},
                    data={
                        "quality": str(quality),
                        "useHashName": "true" if hash_names else "false",
                        "enableWebpCompression": "true" if webp else "false",
                    },
                )

            if response.status_code == 200:
                info = response.json()["data"]
                print(f"[OK] {path.name} -> {info['url']} ({info['size']} bytes)")
                uploaded += 1
            else:
                body = response.json() if response.headers.get("content-type", "").startswith("application/json") else {}
                print(f"[ERR] {path.name}: {body.get('error', response.text)}")
                errors += 1

        client.post("/api/auth/logout")

    return uploaded, errors


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Upload a directory of images to the image host')
    parser.add_argument('directory', help='Directory containing images')
    parser.add_argument('--url', default=os.getenv('IMAGE_HOST_URL', 'http://localhost:8000'),
                        help='Base URL of the image host API')
    parser.add_argument('--password', default=os.getenv('ADMIN_PASSWORD'),
                        help='Admin password (defaults to ADMIN_PASSWORD)')
    parser.add_argument('--webp', action='store_true', help='Convert images to WebP')
    parser.add_argument('--quality', type=int, default=80, help='WebP quality (1-100)')
    parser.add_argument('--hash-names', action='store_true', help='Use random hex keys')
    parser.add_argument('--recursive', action='store_true', help='Include subdirectories')
    parser.add_argument('--dry-run', action='store_true', help='List files without uploading')

    args = parser.parse_args()

    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"ERROR: Not a directory: {directory}")
        sys.exit(1)

    images = find_images(directory, recursive=args.recursive)
    print(f"Found {len(images)} images in {directory}")

    if not images:
        sys.exit(0)

    if args.dry_run:
        print("\n=== DRY RUN - Nothing will be uploaded ===\n")
        for path, mime_type in images:
            print(f"Would upload: {path.name} ({mime_type}, {path.stat().st_size} bytes)")
        return

    if not args.password:
        print("ERROR: No password given. Set ADMIN_PASSWORD or pass --password")
        sys.exit(1)

    try:
        uploaded, errors = upload_all(
            args.url,
            args.password,
            images,
            webp=args.webp,
            quality=args.quality,
            hash_names=args.hash_names,
        )
    except httpx.HTTPError as e:
        print(f"ERROR connecting to {args.url}: {e}")
        sys.exit(1)

    print(f"\n=== Upload Complete ===")
    print(f"Uploaded: {uploaded}")
    print(f"Errors: {errors}")

    if errors:
        sys.exit(1)


if __name__ == '__main__':
    main()
