from datetime import datetime, timezone
from typing import List, Optional
import logging

from supabase import Client

from jiji.database.supabase_client import BackendAvailability
from jiji.modules.storage.schemas import FileType, StorageFile

logger = logging.getLogger(__name__)

PLACEHOLDER_STORAGE_URL = "https://placeholder.storage"
PRESENTATION_EXTENSIONS = {"ppt", "pptx", "odp"}
VIDEO_EXTENSIONS = {"mp4", "webm", "mov", "avi", "mkv"}
# Supabase creates this marker object inside empty folders
EMPTY_FOLDER_PLACEHOLDER = ".emptyFolderPlaceholder"

CONTENT_TYPES = {
    "txt": "text/plain",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "ppt": "application/vnd.ms-powerpoint",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "pdf": "application/pdf",
}
BUCKET_FILE_SIZE_LIMIT = 52_428_800  # 50MB


def get_file_type(filename: str) -> FileType:
    """Classify a file by extension"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext in PRESENTATION_EXTENSIONS:
        return "ppt"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    return "other"


def get_content_type(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def storage_folder_for(filename: str) -> str:
    """Bucket folder a file is uploaded into"""
    file_type = get_file_type(filename)
    if file_type == "ppt":
        return "presentations"
    if file_type == "video":
        return "videos"
    return "other"


class StorageService:
    """Learning material files in a Supabase Storage bucket"""

    def __init__(self, supabase: Optional[Client], availability: BackendAvailability, bucket: str = "learning-materials"):
        self.supabase = supabase
        self.availability = availability
        self.bucket = bucket

    def _bucket(self):
        return self.supabase.storage.from_(self.bucket)

    def get_public_url(self, path: str) -> str:
        if self.availability.mock_mode:
            return f"{PLACEHOLDER_STORAGE_URL}/{path}"
        return self._bucket().get_public_url(path)

    def list_files(self, folder: Optional[str] = None) -> List[StorageFile]:
        """List files in a bucket folder, newest first"""
        if self.availability.mock_mode:
            logger.warning("Supabase not configured, returning sample files")
            return get_sample_files()
        try:
            entries = self._bucket().list(
                folder or "",
                {"limit": 100, "sortBy": {"column": "created_at", "order": "desc"}},
            )
        except Exception as e:
            logger.error(f"Error listing storage files: {e}")
            return []

        files = []
        for entry in entries or []:
            name = entry.get("name")
            if not name or name == EMPTY_FOLDER_PLACEHOLDER:
                continue
            path = f"{folder}/{name}" if folder else name
            metadata = entry.get("metadata") or {}
            files.append(StorageFile(
                name=name,
                path=path,
                url=self.get_public_url(path),
                size=metadata.get("size") or 0,
                type=get_file_type(name),
                created_at=entry.get("created_at") or datetime.now(timezone.utc).isoformat(),
            ))
        return files

    def get_files_by_type(self, file_type: FileType) -> List[StorageFile]:
        folder = "presentations" if file_type == "ppt" else "videos"
        return [f for f in self.list_files(folder) if f.type == file_type]

    def file_exists(self, path: str) -> bool:
        if self.availability.mock_mode:
            return False
        folder, _, name = path.rpartition("/")
        try:
            entries = self._bucket().list(folder, {"search": name})
        except Exception as e:
            logger.debug(f"Storage lookup for {path} failed: {e}")
            return False
        return any(entry.get("name") == name for entry in entries or [])

    def get_signed_url(self, path: str, expires_in: int = 3600) -> Optional[str]:
        """Time-limited URL for private file access"""
        if self.availability.mock_mode:
            logger.warning("Supabase not configured, cannot generate signed URL")
            return None
        try:
            result = self._bucket().create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Error creating signed URL: {e}")
            return None
        return result.get("signedURL") or result.get("signedUrl")

    def ensure_bucket(self) -> bool:
        """Create the bucket as public when it does not exist yet"""
        buckets = self.supabase.storage.list_buckets()
        if any(b.name == self.bucket for b in buckets):
            logger.info(f'Bucket "{self.bucket}" exists')
            return False
        self.supabase.storage.create_bucket(
            self.bucket,
            options={"public": True, "file_size_limit": BUCKET_FILE_SIZE_LIMIT},
        )
        logger.info(f'Bucket "{self.bucket}" created')
        return True

    def upload_file(self, storage_path: str, content: bytes) -> str:
        """Upload (or overwrite) a file and return its public URL"""
        self._bucket().upload(
            storage_path,
            content,
            {"content-type": get_content_type(storage_path), "upsert": "true"},
        )
        return self.get_public_url(storage_path)


def get_sample_files() -> List[StorageFile]:
    """Files reported by list_files in mock mode"""
    now = datetime.now(timezone.utc).isoformat()
    samples = [
        ("presentations/rag-intro.pptx", 2_048_000),
        ("presentations/ml-fundamentals.pptx", 3_072_000),
        ("videos/rag-tutorial.mp4", 50_000_000),
        ("videos/neural-networks.mp4", 75_000_000),
    ]
    return [
        StorageFile(
            name=path.rsplit("/", 1)[-1],
            path=path,
            url=f"{PLACEHOLDER_STORAGE_URL}/{path}",
            size=size,
            type=get_file_type(path),
            created_at=now,
        )
        for path, size in samples
    ]
