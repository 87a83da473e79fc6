"""
Upload Samples Script
Uploads every file in a local directory to the learning-materials bucket,
into presentations/, videos/ or other/ depending on the extension.
Run with: python -m jiji.scripts.upload_samples [directory]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Tuple

from supabase import create_client

from jiji.config.settings import Settings
from jiji.database.supabase_client import BackendAvailability
from jiji.modules.storage.service import StorageService, storage_folder_for

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_DIR = Path("samples")


def upload_directory(storage: StorageService, directory: Path) -> Tuple[List[str], List[str]]:
    """Upload all files directly inside `directory`. Returns (uploaded URLs, failure messages)."""
    uploaded, failed = [], []
    for path in sorted(directory.iterdir()):
        if not path.is_file():
            continue
        storage_path = f"{storage_folder_for(path.name)}/{path.name}"
        try:
            url = storage.upload_file(storage_path, path.read_bytes())
            uploaded.append(url)
            logger.info(f"Uploaded {storage_path}")
        except Exception as e:
            failed.append(f"{storage_path}: {e}")
            logger.error(f"Failed to upload {storage_path}: {e}")
    return uploaded, failed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Upload sample learning materials to Supabase Storage")
    parser.add_argument("directory", nargs="?", type=Path, default=DEFAULT_SAMPLES_DIR)
    args = parser.parse_args(argv)

    settings = Settings()
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    if not (settings.supabase_url and key):
        logger.error("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
        sys.exit(1)
    if not args.directory.is_dir():
        logger.error(f"Samples directory not found: {args.directory}")
        sys.exit(1)

    storage = StorageService(
        create_client(settings.supabase_url, key),
        BackendAvailability(database=True, admin=bool(settings.supabase_service_role_key)),
        bucket=settings.storage_bucket,
    )
    try:
        storage.ensure_bucket()
    except Exception as e:
        logger.error(f"Could not prepare bucket {settings.storage_bucket}: {e}")
        sys.exit(1)

    uploaded, failed = upload_directory(storage, args.directory)
    logger.info(f"Upload summary: {len(uploaded)} succeeded, {len(failed)} failed")
    for url in uploaded:
        logger.info(f"  {url}")
    for message in failed:
        logger.warning(f"  {message}")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
